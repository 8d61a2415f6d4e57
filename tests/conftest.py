"""Pytest configuration and fixtures."""

import os
from typing import List

import pytest
from helpers import FakeSender
from loguru import logger

from wakatime_client.core.events import Heartbeat


@pytest.fixture(autouse=True)
def clean_wakatime_env(monkeypatch):
    """Keep WAKATIME_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("WAKATIME_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def log_messages():
    """Capture loguru output at WARNING and above."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="WARNING", format="{level} {message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fake_sender():
    return FakeSender()


@pytest.fixture
def sample_heartbeat():
    return Heartbeat(
        timestamp=1700000000.0,
        entity="/home/user/repo/src/main.rs",
        is_write=False,
        project="repo",
        language="rust",
        cursor_position={"line": 9, "column": 4},
        lines=120,
    )


@pytest.fixture
def git_repo(tmp_path):
    """Create a project with a .git directory and a nested source file."""
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / "src").mkdir()
    source = repo / "src" / "a.rs"
    source.write_text("fn main() {}\n")
    return repo
