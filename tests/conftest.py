"""Shared fixtures for the bakery API test-suite."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

TEST_DB_PATH = Path(tempfile.gettempdir()) / "bakery_api_tests.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ.pop("ACTIVITY_COLLECTOR_URL", None)

import pytest  # noqa: E402

from bakery.config import get_settings  # noqa: E402
from bakery.domain.entities import ActivityEvent  # noqa: E402
from bakery.infrastructure.activity import ActivityDeliveryError  # noqa: E402

get_settings.cache_clear()


class RecordingTransport:
    """In-memory transport remembering every delivered batch."""

    def __init__(self) -> None:
        self.batches: list[list[ActivityEvent]] = []
        self.beacons: list[list[ActivityEvent]] = []
        self.attempts = 0
        self.failures_left = 0
        self.accept_beacons = True

    async def send(self, events: Sequence[ActivityEvent]) -> None:
        self.attempts += 1
        if self.failures_left:
            self.failures_left -= 1
            raise ActivityDeliveryError("collector unavailable")
        self.batches.append(list(events))

    def send_beacon(self, events: Sequence[ActivityEvent]) -> bool:
        if not self.accept_beacons:
            return False
        self.beacons.append(list(events))
        return True

    @property
    def delivered(self) -> list[ActivityEvent]:
        """Every event handed off, through either channel, in delivery order."""

        events = [event for batch in self.batches for event in batch]
        events.extend(event for batch in self.beacons for event in batch)
        return events


@pytest.fixture()
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    from bakery.infrastructure import database

    database.initialize_database()
    database.Base.metadata.drop_all(bind=database.engine)
    database.initialize_database()
    yield
    database.Base.metadata.drop_all(bind=database.engine)
    database.engine.dispose()


@pytest.fixture()
def settings_env(monkeypatch: pytest.MonkeyPatch):
    """Set environment overrides and reload the cached settings."""

    def apply(**values: str) -> None:
        for name, value in values.items():
            monkeypatch.setenv(name, value)
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()
