# Polling tail of a single log stream

import logging
import os
import select
import sys
import termios
import time
import tty
from collections import deque
from contextlib import contextmanager, nullcontext
from typing import Iterable, List, NamedTuple, Optional

import click
import typer

from .aws.client import get_logs_client
from .aws.queries import LogEvent, filter_log_events
from .formatting import format_timestamp

logger = logging.getLogger(__name__)

NO_EVENTS_NOTICE = "No log events found."


class TailLine(NamedTuple):
	text: str
	fg: str


class TailState:
	"""Watermark and bounded scrollback of a tail.

	The watermark only moves forward: after a non-empty fetch it becomes the
	newest event timestamp plus one.
	"""

	def __init__(self, watermark: int, max_lines: int = 1000, use_utc: bool = False):
		self.watermark = watermark
		self.lines = deque(maxlen=max_lines)
		self.last_fetch_empty = False
		self.use_utc = use_utc

	@property
	def texts(self) -> List[str]:
		return [line.text for line in self.lines]

	def apply(self, events: Iterable[LogEvent]):
		events = list(events)
		if not events:
			# One notice per run of empty fetches
			if not self.last_fetch_empty:
				self.lines.append(TailLine(NO_EVENTS_NOTICE, typer.colors.YELLOW))
			self.last_fetch_empty = True
			return
		for event in events:
			timestamp = format_timestamp(event.timestamp, use_utc=self.use_utc)
			self.lines.append(TailLine(f"[{timestamp}] {event.message.rstrip()}", typer.colors.GREEN))
		self.watermark = max(self.watermark, max(event.timestamp for event in events) + 1)
		self.last_fetch_empty = False


class KeyListener:
	"""Holds a terminal in cbreak mode and reads single keys with a timeout.

	Mode changes use ``TCSANOW`` so keys typed while a fetch is in flight stay
	queued for the next ``read_key``.
	"""

	def __init__(self, stream=None):
		self.stream = stream or sys.stdin
		self._saved = None

	def __enter__(self):
		if self.stream.isatty():
			fd = self.stream.fileno()
			self._saved = termios.tcgetattr(fd)
			tty.setcbreak(fd, termios.TCSANOW)
		return self

	def __exit__(self, exc_type, exc, tb):
		if self._saved is not None:
			termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved)
			self._saved = None
		return False

	@contextmanager
	def suspended(self):
		"""Give the terminal back its line mode for the duration of the block."""
		if self._saved is None:
			yield self
			return
		fd = self.stream.fileno()
		termios.tcsetattr(fd, termios.TCSADRAIN, self._saved)
		try:
			yield self
		finally:
			tty.setcbreak(fd, termios.TCSANOW)

	def read_key(self, timeout: float) -> Optional[str]:
		"""Return one key, or None when nothing was typed within ``timeout`` seconds."""
		if not self.stream.isatty():
			time.sleep(timeout)
			return None
		ready, _, _ = select.select([self.stream], [], [], timeout)
		if not ready:
			return None
		return os.read(self.stream.fileno(), 1).decode("utf-8", errors="ignore")


class TailSession:
	"""Fetch, repaint, wait for the quit key; repeat."""

	def __init__(self, region, group, stream, manager, cfg, use_utc=False, listener_factory=KeyListener, clock=time.time):
		self.region = region
		self.group = group
		self.stream = stream
		self.manager = manager
		self.poll_interval = cfg.poll_interval
		self.max_fetch_events = cfg.max_fetch_events
		self.quit_key = cfg.quit_key
		self.listener_factory = listener_factory
		self.clock = clock
		start = int((clock() - cfg.lookback_minutes * 60) * 1000)
		self.state = TailState(start, max_lines=cfg.max_log_lines, use_utc=use_utc)
		self._client = None
		self._client_credentials = None
		self._listener = None

	def client_for(self, credentials):
		# Rebuild only after a refresh swapped the credentials
		if self._client is None or credentials is not self._client_credentials:
			self._client = get_logs_client(self.region, credentials)
			self._client_credentials = credentials
		return self._client

	def poll_once(self) -> List[LogEvent]:
		events = self.manager.with_refresh(
			lambda credentials: filter_log_events(
				self.client_for(credentials),
				self.group,
				self.stream,
				self.state.watermark,
				self.max_fetch_events,
			),
			around_refresh=self._listener.suspended if self._listener is not None else nullcontext,
		)
		self.state.apply(events)
		return events

	def render(self):
		click.clear()
		for line in self.state.lines:
			typer.echo(typer.style(line.text, fg=line.fg))
		typer.echo(typer.style(f'Press "{self.quit_key}" to stop streaming logs.', fg=typer.colors.BLUE))

	def wait_for_quit(self, listener) -> bool:
		"""Wait one poll interval; True when the quit key was pressed."""
		deadline = self.clock() + self.poll_interval
		while True:
			remaining = deadline - self.clock()
			if remaining <= 0:
				return False
			if listener.read_key(remaining) == self.quit_key:
				return True

	def run(self):
		logger.debug("Tailing %s / %s from %d", self.group, self.stream, self.state.watermark)
		with self.listener_factory() as listener:
			self._listener = listener
			try:
				while True:
					self.poll_once()
					self.render()
					if self.wait_for_quit(listener):
						break
			finally:
				self._listener = None
		typer.echo(typer.style("Stopped streaming logs.", fg=typer.colors.GREEN))
