# EchoHandler implementation

import logging

import typer

_LEVEL_STYLES = {
	logging.DEBUG: {"dim": True},
	logging.INFO: {},
	logging.WARNING: {"fg": typer.colors.YELLOW},
	logging.ERROR: {"fg": typer.colors.RED},
	logging.CRITICAL: {"fg": typer.colors.RED, "bold": True},
}


class EchoHandler(logging.Handler):
	"""Logging handler that writes records to stderr through typer, coloured by level."""
	def __init__(self, level=logging.WARNING):
		super().__init__(level)

	def emit(self, record):
		try:
			message = self.format(record)
			typer.echo(typer.style(message, **self.style_for(record)), err=True)
		except Exception:
			self.handleError(record)

	def style_for(self, record):
		# Levels between the named ones take the style of the level below
		style = {}
		for levelno in sorted(_LEVEL_STYLES):
			if record.levelno >= levelno:
				style = _LEVEL_STYLES[levelno]
		return style


def configure_logging(verbose=False):
	"""Attach a single EchoHandler to the package logger."""
	logger = logging.getLogger("cwlogs")
	level = logging.DEBUG if verbose else logging.WARNING
	handler = EchoHandler(level=level)
	if verbose:
		handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
	else:
		handler.setFormatter(logging.Formatter("%(message)s"))
	logger.handlers = [handler]
	logger.setLevel(level)
	logger.propagate = False
	return handler
