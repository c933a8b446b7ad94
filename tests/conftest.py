import os
import sys

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
	sys.path.insert(0, SRC_DIR)

import pytest

from cwlogs import config
from cwlogs.credentials import Credentials


class ScriptedMenu:
    """Stands in for prompts.select: answers from a list and records each menu."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def __call__(self, message, choices, default=None, back=False):
        self.calls.append({
            "message": message,
            "values": [value for _, value in choices],
            "labels": [label for label, _ in choices],
            "default": default,
            "back": back,
        })
        if not self.answers:
            raise AssertionError(f"Unexpected menu: {message}")
        return self.answers.pop(0)


class FakeManager:
    """Credential manager that never refreshes."""

    def __init__(self, credentials=None):
        self.credentials = credentials or Credentials("AKIAFAKE", "secret", "token", "us-east-1")
        self.regions = []

    def with_refresh(self, operation, around_refresh=None):
        return operation(self.credentials)

    def set_region(self, region):
        self.regions.append(region)
        return self.credentials


@pytest.fixture
def manager():
    return FakeManager()


@pytest.fixture
def scripted_menu(monkeypatch):
    """Install a ScriptedMenu; call the fixture with the answers to give."""
    from cwlogs import prompts

    def _install(*answers):
        menu = ScriptedMenu(answers)
        monkeypatch.setattr(prompts, "select", menu)
        return menu
    return _install


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep tests away from real .env files and the real credential file."""
    monkeypatch.setattr(config, "_dotenv_loaded", True)
    monkeypatch.setattr(config, "_custom_dotenv_path", None)
    monkeypatch.setenv("CWLOGS_CONFIG_PATH", str(tmp_path / "cwlogs-config.json"))
