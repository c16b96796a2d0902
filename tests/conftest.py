"""Shared test fixtures and configuration.

Sets up fake environment variables before any ireminder imports, and
provides a controllable clock plus temp-file backed stores.
"""

import os

# Patch env vars BEFORE any ireminder imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("OPENAI_API_KEY", "")

from datetime import datetime, timedelta

import pytest


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """A clock pinned to Wednesday 2026-03-04 11:00."""
    return FakeClock(datetime(2026, 3, 4, 11, 0))


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_ireminder.db")


@pytest.fixture
def storage(tmp_db_path):
    """Return a StateStorage instance backed by a temp file."""
    from ireminder.data.storage import StateStorage
    return StateStorage(db_path=tmp_db_path)


@pytest.fixture
def task_store(storage, clock):
    from ireminder.data.task_store import TaskStore
    return TaskStore(storage, clock=clock)


@pytest.fixture
def wellness_store(storage, clock):
    from ireminder.data.wellness_store import WellnessStore
    return WellnessStore(storage, clock=clock)


@pytest.fixture
def settings_store(storage):
    from ireminder.data.settings_store import SettingsStore
    return SettingsStore(storage)
