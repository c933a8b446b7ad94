# Configuration loading for cwlogs

import os

# Lazy load dotenv - only when config is first accessed
_dotenv_loaded = False
_custom_dotenv_path = None

DEFAULT_CREDENTIALS_FILE = ".cwlogs-config.json"


def _getenv(name, default):
	value = os.getenv(name)
	return value if value else default


class CwlogsConfig:
	"""Loads configuration from environment variables and provides defaults."""
	def __init__(self):
		default_path = os.path.join(os.path.expanduser("~"), DEFAULT_CREDENTIALS_FILE)
		self.credentials_path = os.path.expanduser(_getenv("CWLOGS_CONFIG_PATH", default_path))
		# Tail loop tuning
		self.poll_interval = float(_getenv("CWLOGS_POLL_INTERVAL", "2"))
		self.max_log_lines = int(_getenv("CWLOGS_MAX_LOG_LINES", "1000"))
		self.max_fetch_events = int(_getenv("CWLOGS_MAX_FETCH_EVENTS", "200"))
		self.lookback_minutes = int(_getenv("CWLOGS_LOOKBACK_MINUTES", "10"))
		self.quit_key = _getenv("CWLOGS_QUIT_KEY", "q")
		# Credential handling
		self.session_duration = int(_getenv("CWLOGS_SESSION_DURATION", "3600"))
		self.max_refresh_attempts = int(_getenv("CWLOGS_MAX_REFRESH_ATTEMPTS", "3"))


def set_dotenv_path(path: str):
	"""Set a custom .env file path to load. Must be called before load_config()."""
	global _custom_dotenv_path, _dotenv_loaded
	_custom_dotenv_path = path
	_dotenv_loaded = False  # Reset to force reload with new path


def load_config() -> CwlogsConfig:
	"""Return a config object with all settings loaded."""
	global _dotenv_loaded, _custom_dotenv_path
	if not _dotenv_loaded:
		from dotenv import load_dotenv, find_dotenv
		dotenv_path = os.getenv("DOTENV_PATH") or _custom_dotenv_path
		if dotenv_path:
			# Explicit files win over values already in the environment
			load_dotenv(dotenv_path, override=True)
		else:
			dotenv_path = find_dotenv(usecwd=True)
			if dotenv_path:
				load_dotenv(dotenv_path)
		_dotenv_loaded = True
	return CwlogsConfig()
