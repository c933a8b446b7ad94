# Log stream selection

import logging
from typing import Iterable, List, Tuple

from . import prompts
from .aws.client import NotFoundError, get_logs_client
from .aws.queries import LogStream, fetch_log_streams
from .formatting import format_timestamp
from .navigator import group_location

logger = logging.getLogger(__name__)


def sort_streams(streams: Iterable[LogStream]) -> List[LogStream]:
	"""Most recent event first; streams that never received an event go last."""
	return sorted(streams, key=lambda stream: stream.last_event_timestamp or 0, reverse=True)


def stream_label(stream: LogStream, use_utc: bool = False) -> str:
	if stream.last_event_timestamp:
		last_event = format_timestamp(stream.last_event_timestamp, use_utc=use_utc)
	else:
		last_event = "No events"
	return f"{stream.name} (Last Event: {last_event})"


def fetch_streams(navigator, group: str) -> List[LogStream]:
	prompts.notify("Fetching log streams...")
	streams = navigator.manager.with_refresh(
		lambda credentials: fetch_log_streams(get_logs_client(navigator.region, credentials), group)
	)
	if not streams:
		raise NotFoundError(f"No log streams found in {group}.")
	return streams


def select_stream(navigator, group: str) -> Tuple[str, str]:
	"""Pick a stream of ``group``; "Back" navigates from the group's parent level.

	Returns the (possibly changed) group together with the chosen stream.
	"""
	while True:
		streams = sort_streams(fetch_streams(navigator, group))
		choices = [(stream_label(stream, use_utc=navigator.use_utc), stream.name) for stream in streams]
		choice = prompts.select("Select Log Stream:", choices, back=True)
		if choice != prompts.BACK:
			return group, choice
		main_namespace, prefix = group_location(group)
		logger.debug("Back from %s to /%s/%s", group, main_namespace, prefix)
		group = navigator.choose_group(main_namespace, prefix)
