# CloudWatch Logs and STS calls

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3

from .client import translate_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogGroup:
	name: str
	creation_time: int = 0


@dataclass(frozen=True)
class LogStream:
	name: str
	last_event_timestamp: Optional[int] = None


@dataclass(frozen=True)
class LogEvent:
	timestamp: int
	message: str


def _paginate(client, operation: str, key: str, **kwargs) -> List[Dict[str, Any]]:
	items: List[Dict[str, Any]] = []
	paginator = client.get_paginator(operation)
	for page in paginator.paginate(**kwargs):
		items.extend(page.get(key, []))
	return items


def fetch_log_groups(client) -> List[LogGroup]:
	"""Fetch every log group in the client's region, all pages merged."""
	with translate_errors("fetching log groups"):
		raw = _paginate(client, "describe_log_groups", "logGroups")
	logger.debug("Fetched %d log groups", len(raw))
	return [LogGroup(name=item["logGroupName"], creation_time=item.get("creationTime") or 0) for item in raw]


def fetch_log_streams(client, group: str) -> List[LogStream]:
	"""Fetch every stream of a log group, all pages merged."""
	with translate_errors("fetching log streams"):
		raw = _paginate(client, "describe_log_streams", "logStreams", logGroupName=group)
	logger.debug("Fetched %d log streams for %s", len(raw), group)
	return [LogStream(name=item["logStreamName"], last_event_timestamp=item.get("lastEventTimestamp")) for item in raw]


def filter_log_events(client, group: str, stream: str, start_time: int, limit: int) -> List[LogEvent]:
	"""Fetch at most ``limit`` events of one stream at or after ``start_time`` (epoch ms)."""
	with translate_errors("fetching log events"):
		response = client.filter_log_events(
			logGroupName=group,
			logStreamNames=[stream],
			startTime=start_time,
			limit=limit,
		)
	events = response.get("events", [])
	logger.debug("Fetched %d events from %s since %d", len(events), stream, start_time)
	return [LogEvent(timestamp=event["timestamp"], message=event.get("message", "")) for event in events]


def get_session_token(client, duration_seconds: int) -> Dict[str, str]:
	"""Exchange the client's key pair for temporary credentials."""
	with translate_errors("requesting a session token"):
		response = client.get_session_token(DurationSeconds=duration_seconds)
	return response["Credentials"]


def available_regions() -> List[str]:
	"""Regions that offer CloudWatch Logs, as known by the installed botocore."""
	return sorted(boto3.session.Session().get_available_regions("logs"))
