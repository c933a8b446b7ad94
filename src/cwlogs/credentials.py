# Credential loading, validation, persistence and refresh

import json
import logging
import os
import dataclasses
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from . import prompts
from .aws.client import ConfigurationError, CwlogsError, ExpiredTokenError, get_sts_client
from .aws.queries import available_regions, get_session_token

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Credentials:
	access_key_id: str
	secret_access_key: str
	session_token: Optional[str] = None
	region: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Credentials":
		return cls(
			access_key_id=data.get("accessKeyId"),
			secret_access_key=data.get("secretAccessKey"),
			session_token=data.get("sessionToken") or None,
			region=data.get("region") or None,
		)

	def to_dict(self) -> Dict[str, Any]:
		data = {
			"accessKeyId": self.access_key_id,
			"secretAccessKey": self.secret_access_key,
			"region": self.region,
		}
		if self.session_token:
			data["sessionToken"] = self.session_token
		return data


def _non_blank(value: Any) -> bool:
	return isinstance(value, str) and value.strip() != ""


def validate_credentials(credentials: Any) -> bool:
	"""True when both key fields are non-blank strings."""
	if credentials is None:
		return False
	if isinstance(credentials, dict):
		return _non_blank(credentials.get("accessKeyId")) and _non_blank(credentials.get("secretAccessKey"))
	return _non_blank(getattr(credentials, "access_key_id", None)) and _non_blank(
		getattr(credentials, "secret_access_key", None)
	)


class CredentialStore:
	"""JSON credential file at a fixed per-user path."""

	def __init__(self, path: str):
		self.path = path

	def load(self) -> Optional[Credentials]:
		try:
			with open(self.path, "r", encoding="utf-8") as fh:
				data = json.load(fh)
		except FileNotFoundError:
			return None
		except (OSError, ValueError) as e:
			logger.debug("Ignoring unreadable credential file %s: %s", self.path, e)
			return None
		if not validate_credentials(data):
			logger.debug("Ignoring credential file %s with missing keys", self.path)
			return None
		return Credentials.from_dict(data)

	def save(self, credentials: Credentials):
		fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
		with os.fdopen(fd, "w", encoding="utf-8") as fh:
			# O_CREAT modes only apply to new files
			os.fchmod(fh.fileno(), 0o600)
			json.dump(credentials.to_dict(), fh)
		logger.debug("Stored credentials in %s", self.path)


def prompt_for_credentials() -> Credentials:
	"""Collect a credential set from the operator."""
	logger.debug("Prompting user for AWS credentials")
	access_key_id = prompts.ask("Enter your AWS Access Key ID")
	secret_access_key = prompts.ask("Enter your AWS Secret Access Key", secret=True)
	session_token = prompts.ask("Enter your AWS Session Token (if any)", secret=True, default="")
	region = prompts.select("Select AWS Region:", [(name, name) for name in available_regions()])
	return Credentials(
		access_key_id=access_key_id,
		secret_access_key=secret_access_key,
		session_token=session_token or None,
		region=region,
	)


class CredentialManager:
	"""Owns the live credentials and replaces them on refresh."""

	def __init__(self, store: CredentialStore, session_duration=3600, max_refresh_attempts=3,
			prompt: Callable[[], Credentials] = None):
		self.store = store
		self.session_duration = session_duration
		self.max_refresh_attempts = max_refresh_attempts
		self._prompt = prompt or prompt_for_credentials
		self._credentials: Optional[Credentials] = None

	@property
	def credentials(self) -> Credentials:
		if self._credentials is None:
			raise ConfigurationError("AWS credentials have not been acquired.")
		return self._credentials

	def replace(self, credentials: Credentials) -> Credentials:
		"""Swap in a new credential set and persist it."""
		if not validate_credentials(credentials):
			raise ConfigurationError("AWS Access Key ID and Secret Access Key are required.")
		self.store.save(credentials)
		self._credentials = credentials
		return credentials

	def acquire(self) -> Credentials:
		"""Load stored credentials, prompting and requesting a session token as needed."""
		credentials = self.store.load()
		if credentials is None:
			credentials = self._collect()
			self.replace(credentials)
		else:
			self._credentials = credentials
		if not credentials.session_token:
			self.replace(self._with_session_token(credentials))
		return self.credentials

	def refresh(self) -> Credentials:
		"""Re-enter credentials after AWS rejected the current ones."""
		logger.error("The security token is expired or invalid. Requesting new credentials.")
		credentials = self._collect()
		if not credentials.session_token:
			credentials = self._with_session_token(credentials)
		return self.replace(credentials)

	def set_region(self, region: str) -> Credentials:
		if self.credentials.region == region:
			return self.credentials
		return self.replace(dataclasses.replace(self.credentials, region=region))

	def with_refresh(self, operation: Callable[[Credentials], T], around_refresh=nullcontext) -> T:
		"""Run ``operation``; on a rejected token refresh and retry, a bounded number of times.

		``around_refresh`` is a context factory entered while the operator is
		prompted for new credentials.
		"""
		refreshes = 0
		while True:
			try:
				return operation(self.credentials)
			except ExpiredTokenError:
				if refreshes >= self.max_refresh_attempts:
					raise ConfigurationError(
						f"AWS rejected the credentials after {refreshes} attempts. "
						f"Check the access key and secret key and try again."
					)
				refreshes += 1
				with around_refresh():
					self.refresh()

	def _collect(self) -> Credentials:
		credentials = self._prompt()
		if not validate_credentials(credentials):
			raise ConfigurationError("AWS Access Key ID and Secret Access Key are required.")
		return credentials

	def _with_session_token(self, credentials: Credentials) -> Credentials:
		# Degrade to the long-lived keys when STS refuses
		try:
			issued = get_session_token(get_sts_client(credentials), self.session_duration)
		except CwlogsError as e:
			logger.warning("Failed to get session token. Please check your AWS credentials. (%s)", e)
			return credentials
		logger.debug("Obtained a session token valid until %s", issued.get("Expiration"))
		return dataclasses.replace(
			credentials,
			access_key_id=issued["AccessKeyId"],
			secret_access_key=issued["SecretAccessKey"],
			session_token=issued["SessionToken"],
		)
