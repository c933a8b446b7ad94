# Interactive prompts built on typer/click

from typing import Any, List, Optional, Sequence, Tuple

import click
import typer

# Menu value returned when the operator picks "Back"
BACK = "__back__"

Choice = Tuple[str, Any]


def notify(message: str):
	"""Print a progress line that is not part of the menu output."""
	typer.echo(typer.style(message, dim=True), err=True)


def select(message: str, choices: Sequence[Choice], default: Any = None, back: bool = False) -> Any:
	"""Show a numbered menu and return the value of the chosen entry.

	``choices`` is a sequence of ``(label, value)`` pairs. With ``back=True`` a
	final "Back" entry returning ``BACK`` is added.
	"""
	entries: List[Choice] = list(choices)
	if back:
		entries.append(("Back", BACK))
	if not entries:
		raise ValueError("A menu needs at least one choice")
	default_index: Optional[int] = None
	for index, (_, value) in enumerate(entries, start=1):
		if default is not None and value == default:
			default_index = index
	typer.echo(typer.style(message, bold=True))
	width = len(str(len(entries)))
	for index, (label, _) in enumerate(entries, start=1):
		typer.echo(f"  {index:>{width}}) {label}")
	picked = typer.prompt(
		"Choice",
		type=click.IntRange(1, len(entries)),
		default=default_index,
	)
	return entries[picked - 1][1]


def ask(message: str, secret: bool = False, default: Optional[str] = None) -> str:
	"""Ask for a line of text; ``secret`` hides what is typed."""
	value = typer.prompt(message, hide_input=secret, default=default, show_default=False)
	return value.strip()


def confirm(message: str, default: bool = True) -> bool:
	return typer.confirm(message, default=default)
