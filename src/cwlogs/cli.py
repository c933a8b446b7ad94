import contextlib
import signal
import sys

# Handle Ctrl+C gracefully before any other imports
signal.signal(signal.SIGINT, lambda *_: sys.exit(130))

import click
import typer

from . import prompts
from .aws.client import CwlogsError
from .config import load_config, set_dotenv_path
from .credentials import CredentialManager, CredentialStore
from .handler import configure_logging
from .navigator import NamespaceNavigator, select_region
from .streams import select_stream
from .tail import TailSession

app = typer.Typer(help="CLI Tool to read CloudWatch logs easily from the console")


@app.callback()
def root(
	env: str = typer.Option(None, "--env", help="Path to a .env file with cwlogs settings"),
):
	"""Browse CloudWatch log groups and tail log streams."""
	if env:
		set_dotenv_path(env)


def run_session(use_utc=False):
	"""Credentials, region, group, stream, then tail until the operator stops."""
	cfg = load_config()
	typer.echo("Starting the log reading process...")
	manager = CredentialManager(
		CredentialStore(cfg.credentials_path),
		session_duration=cfg.session_duration,
		max_refresh_attempts=cfg.max_refresh_attempts,
	)
	manager.acquire()
	region = select_region(manager)
	navigator = NamespaceNavigator(region, manager, use_utc=use_utc)
	group = navigator.choose_group()
	while True:
		group, stream = select_stream(navigator, group)
		TailSession(region, group, stream, manager, cfg, use_utc=use_utc).run()
		if not prompts.confirm("Do you want to go back to the previous menu?", default=True):
			return


@app.command()
def logs(
	utc: bool = typer.Option(False, "--utc", help="Display timestamps in UTC instead of local time"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
	"""Read CloudWatch logs interactively."""
	import traceback

	configure_logging(verbose)
	try:
		run_session(use_utc=utc)
	except CwlogsError as e:
		typer.echo(typer.style(str(e), fg=typer.colors.RED), err=True)
		raise typer.Exit(1)
	except (typer.Exit, typer.Abort):
		raise
	except Exception as e:
		if verbose:
			typer.echo(typer.style("Verbose stack trace:", fg=typer.colors.RED), err=True)
			traceback.print_exc()
		typer.echo(typer.style(
			f"An unexpected error occurred: {type(e).__name__}: {e}",
			fg=typer.colors.RED
		), err=True)
		raise typer.Exit(1)


def main():
	if len(sys.argv) == 1:
		# No arguments: show help
		command = typer.main.get_command(app)
		ctx = click.Context(command)
		# rich-formatted help prints itself to stdout
		with contextlib.redirect_stdout(sys.stderr):
			help_text = command.get_help(ctx)
		if help_text.strip():
			typer.echo(help_text, err=True)
		return 0
	try:
		app()
	except typer.Exit:
		raise
	except Exception as e:
		typer.echo(typer.style(
			f"Fatal error: {type(e).__name__}: {e}",
			fg=typer.colors.RED
		), err=True)
		sys.exit(1)


if __name__ == "__main__":
	main()
