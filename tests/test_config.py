"""Tests for settings validation and the activity batcher factory."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from bakery.config import Settings
from bakery.infrastructure.activity import HttpActivityTransport
from main import build_activity_batcher


@pytest.mark.parametrize(
    "overrides",
    [
        {"activity_batch_size": 0},
        {"activity_flush_interval_ms": 0},
        {"client_activity_rate_max_requests": 0},
        {"activity_collector_url": "collector.local/events"},
    ],
)
def test_malformed_settings_are_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_no_batcher_without_collector_url() -> None:
    assert build_activity_batcher(Settings(activity_collector_url=None)) is None


def test_batcher_built_from_settings() -> None:
    settings = Settings(
        activity_collector_url=" https://audit.bakery.local/api/audit/client-activities ",
        activity_batch_size=25,
        activity_flush_interval_ms=2500,
        activity_tracking_enabled=False,
    )

    batcher = build_activity_batcher(settings)

    assert batcher is not None
    assert batcher.batch_size == 25
    assert batcher.flush_interval == 2.5
    assert batcher.enabled is False
    assert isinstance(batcher.transport, HttpActivityTransport)
    assert batcher.transport.endpoint == "https://audit.bakery.local/api/audit/client-activities"
