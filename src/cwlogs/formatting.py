# Timestamp formatting for menus and tailed lines

from datetime import datetime, timezone
from typing import Optional


def to_datetime(epoch_ms: int, use_utc: bool = False) -> datetime:
	if use_utc:
		return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
	return datetime.fromtimestamp(epoch_ms / 1000).astimezone()


def format_timestamp(epoch_ms: Optional[int], use_utc: bool = False) -> str:
	"""Render epoch milliseconds as ISO 8601 with millisecond precision."""
	if epoch_ms is None:
		return ""
	text = to_datetime(epoch_ms, use_utc=use_utc).isoformat(timespec="milliseconds")
	return text.replace("+00:00", "Z") if use_utc else text
