"""Browse CloudWatch log groups and tail log streams from the terminal."""

__version__ = "1.0.0"
