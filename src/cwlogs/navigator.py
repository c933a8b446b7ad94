# Log group namespace navigation

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from . import prompts
from .aws.client import NotFoundError, get_logs_client
from .aws.queries import LogGroup, available_regions, fetch_log_groups
from .formatting import format_timestamp

logger = logging.getLogger(__name__)

DATE_FILTERS = [
	("All", "all"),
	("This Year", "year"),
	("This Month", "month"),
	("Today", "day"),
]


def main_namespace_of(name: str) -> str:
	"""First path segment of a group name: ``/aws/lambda/x`` -> ``aws``."""
	return name.lstrip("/").split("/", 1)[0]


def relative_path(name: str, main_namespace: str) -> Optional[str]:
	"""Path of ``name`` below ``/{main_namespace}/``, or None when it lies elsewhere."""
	stripped = name.lstrip("/")
	if stripped == main_namespace:
		return ""
	if stripped.startswith(main_namespace + "/"):
		return stripped[len(main_namespace) + 1:]
	return None


def groups_under(groups: Iterable[LogGroup], main_namespace: str, prefix: str = "") -> List[LogGroup]:
	matching = []
	for group in groups:
		rel = relative_path(group.name, main_namespace)
		if rel is not None and rel.startswith(prefix):
			matching.append(group)
	return matching


def next_segments(names: Iterable[str], main_namespace: str, prefix: str = "") -> List[str]:
	"""Distinct next path segments below ``prefix``.

	A segment ending in ``/`` is a sub-level; anything else is a leaf suffix.
	"""
	segments = set()
	for name in names:
		rel = relative_path(name, main_namespace)
		if rel is None or not rel.startswith(prefix):
			continue
		remaining = rel[len(prefix):]
		slash = remaining.find("/")
		if slash != -1:
			remaining = remaining[:slash + 1]
		segments.add(remaining)
	return sorted(segments)


def parent_prefix(prefix: str) -> str:
	"""Drop the last level of a prefix: ``b/c/`` -> ``b/``, ``b/`` -> ``""``."""
	trimmed = prefix.rstrip("/")
	return trimmed[:trimmed.rfind("/") + 1]


def group_location(name: str) -> Tuple[str, str]:
	"""Main namespace and enclosing prefix of a group, for navigating one level up."""
	main_namespace = main_namespace_of(name)
	rel = relative_path(name, main_namespace) or ""
	return main_namespace, rel[:rel.rfind("/") + 1]


def filter_by_date(groups: Iterable[LogGroup], period: str, now: Optional[datetime] = None) -> List[LogGroup]:
	"""Keep groups created in the current year, month or day (local calendar)."""
	if period == "all":
		return list(groups)
	if period not in ("year", "month", "day"):
		raise ValueError(f"Unknown date filter: {period}")
	now = now or datetime.now()
	kept = []
	for group in groups:
		created = datetime.fromtimestamp(group.creation_time / 1000)
		if created.year != now.year:
			continue
		if period in ("month", "day") and created.month != now.month:
			continue
		if period == "day" and created.day != now.day:
			continue
		kept.append(group)
	return kept


class NamespaceNavigator:
	"""Menu-driven walk over the log groups of one region."""

	def __init__(self, region, manager, use_utc=False):
		self.region = region
		self.manager = manager
		self.use_utc = use_utc

	def fetch_groups(self) -> List[LogGroup]:
		prompts.notify("Fetching log groups...")
		groups = self.manager.with_refresh(
			lambda credentials: fetch_log_groups(get_logs_client(self.region, credentials))
		)
		if not groups:
			raise NotFoundError("No log groups found.")
		return groups

	def select_main_namespace(self) -> str:
		groups = self.fetch_groups()
		names = sorted({main_namespace_of(group.name) for group in groups})
		return prompts.select("Select Main Log Group:", [(name, name) for name in names])

	def select_group(self, main_namespace: str, prefix: str = "") -> Optional[str]:
		"""Walk down from ``prefix`` and return a full group name.

		Returns None when the operator goes back past the top level.
		"""
		while True:
			matching = groups_under(self.fetch_groups(), main_namespace, prefix)
			segments = next_segments([group.name for group in matching], main_namespace, prefix)
			if len(segments) > 1 or (len(segments) == 1 and segments[0].endswith("/")):
				logger.debug("Level /%s/%s has %d entries", main_namespace, prefix, len(segments))
				choice = prompts.select(
					"Select Log Group:",
					[(segment or main_namespace, segment) for segment in segments],
					back=True,
				)
				if choice == prompts.BACK:
					if not prefix:
						return None
					prefix = parent_prefix(prefix)
				elif choice.endswith("/"):
					prefix += choice
				else:
					return self._leaf_name(matching, main_namespace, prefix + choice)
			else:
				return self._select_by_date(matching, main_namespace, prefix)

	def choose_group(self, main_namespace: Optional[str] = None, prefix: str = "") -> str:
		"""Ask for the main namespace as needed and navigate to a group."""
		while True:
			if main_namespace is None:
				main_namespace = self.select_main_namespace()
			group = self.select_group(main_namespace, prefix)
			if group is not None:
				return group
			main_namespace, prefix = None, ""

	def _leaf_name(self, matching, main_namespace, rel):
		for group in matching:
			if relative_path(group.name, main_namespace) == rel:
				return group.name
		raise NotFoundError(f"Log group /{main_namespace}/{rel} no longer exists.")

	def _select_by_date(self, matching, main_namespace, prefix):
		if not matching:
			raise NotFoundError(f"No log groups found under /{main_namespace}/{prefix}")
		while True:
			period = prompts.select("Filter log groups by date:", DATE_FILTERS)
			filtered = filter_by_date(matching, period)
			if filtered:
				break
			prompts.notify("No log groups were created in that period.")
		filtered.sort(key=lambda group: group.creation_time, reverse=True)
		choices = [
			(f"{group.name} (Created: {format_timestamp(group.creation_time, use_utc=self.use_utc)})", group.name)
			for group in filtered
		]
		return prompts.select("Select Log Group:", choices)


def select_region(manager) -> str:
	"""Pick the region to browse, defaulting to the one stored with the credentials."""
	regions = available_regions()
	region = prompts.select(
		"Select AWS Region:",
		[(name, name) for name in regions],
		default=manager.credentials.region,
	)
	manager.set_region(region)
	return region
