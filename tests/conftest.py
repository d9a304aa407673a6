"""Pytest configuration and shared fixtures for usagestatus tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from loguru import logger

from usagestatus.models import (
    Availability,
    MetricKind,
    UsageMetricSnapshot,
    UsageProviderKind,
    UsageProviderSnapshot,
)
from usagestatus.status import UsageStatus
from usagestatus.telemetry import TokenUsageSnapshot


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path) -> None:
    """Keep tests away from the real config and Codex home."""
    monkeypatch.setenv("USAGESTATUS_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("CODEX_HOME", str(tmp_path / "codex"))
    monkeypatch.delenv("USAGESTATUS_CODEX_HOME", raising=False)
    monkeypatch.delenv("USAGESTATUS_NO_COLOR", raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks the CLI installs so they don't outlive a test."""
    yield
    logger.remove()
    logger.disable("usagestatus")


@pytest.fixture
def utc_now() -> datetime:
    """Fixed UTC datetime for consistent testing."""
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def future_time(utc_now: datetime) -> datetime:
    """Time 2 hours in the future."""
    return utc_now + timedelta(hours=2)


@pytest.fixture
def past_time(utc_now: datetime) -> datetime:
    """Time 2 hours in the past."""
    return utc_now - timedelta(hours=2)


@pytest.fixture
def empty_status(utc_now: datetime) -> UsageStatus:
    """Status with only a timestamp."""
    return UsageStatus(updated_at=utc_now)


@pytest.fixture
def sample_status(utc_now: datetime) -> UsageStatus:
    """Fully populated status with future resets."""
    return UsageStatus(
        updated_at=utc_now,
        context_used_tokens=500_000,
        context_limit_tokens=1_000_000,
        primary_window_used_percent=42.0,
        primary_window_minutes=300,
        primary_reset_at=utc_now + timedelta(seconds=1000),
        secondary_window_used_percent=12.5,
        secondary_window_minutes=10080,
        secondary_reset_at=utc_now + timedelta(days=3),
    )


@pytest.fixture
def sample_token_usage(utc_now: datetime) -> TokenUsageSnapshot:
    """Telemetry snapshot mirroring sample_status."""
    return TokenUsageSnapshot(
        timestamp=utc_now,
        total_tokens=500_000,
        context_window=1_000_000,
        primary_percent=42.0,
        primary_window_minutes=300,
        primary_reset_at=utc_now + timedelta(seconds=1000),
        secondary_percent=12.5,
        secondary_window_minutes=10080,
        secondary_reset_at=utc_now + timedelta(days=3),
    )


@pytest.fixture
def sample_provider_snapshot(utc_now: datetime) -> UsageProviderSnapshot:
    """Ready snapshot with a context and two window metrics."""
    return UsageProviderSnapshot(
        provider=UsageProviderKind.CODEX,
        title="Codex",
        availability=Availability.READY,
        metrics=(
            UsageMetricSnapshot(
                kind=MetricKind.CONTEXT,
                label="Context",
                usage_text="500K used / 1M total",
                percent_text="50%",
                progress=0.5,
            ),
            UsageMetricSnapshot(
                kind=MetricKind.FIVE_HOUR,
                label="5h limit",
                usage_text="2.9h remaining",
                percent_text="42%",
                progress=0.42,
                reset_at=utc_now + timedelta(hours=3),
                fallback_window_minutes=300,
            ),
            UsageMetricSnapshot(
                kind=MetricKind.WEEKLY,
                label="Weekly limit",
                usage_text="6.1d remaining",
                percent_text="12%",
                progress=0.125,
                reset_at=utc_now + timedelta(days=3),
                fallback_window_minutes=10080,
            ),
        ),
        updated_at=utc_now,
    )


def _token_count_row(
    timestamp: str = "2025-01-15T12:00:00.000Z",
    total_tokens: int | None = 500_000,
    context_window: int | None = 1_000_000,
    rate_limits: dict | None = None,
) -> dict:
    """Build a Codex rollout row carrying a token_count event."""
    info: dict = {}
    if total_tokens is not None:
        info["total_token_usage"] = {"total_tokens": total_tokens}
    if context_window is not None:
        info["model_context_window"] = context_window
    payload: dict = {"type": "token_count", "info": info or None}
    if rate_limits is not None:
        payload["rate_limits"] = rate_limits
    return {"timestamp": timestamp, "type": "event_msg", "payload": payload}


@pytest.fixture
def token_count_row():
    """Factory for token_count rollout rows."""
    return _token_count_row


@pytest.fixture
def write_rollout(tmp_path: Path):
    """Write rows as a JSONL rollout file and return its path."""

    def _write(rows: list, name: str = "rollout-2025-01-15T12-00-00.jsonl") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [row if isinstance(row, str) else json.dumps(row) for row in rows]
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def sample_rollout(write_rollout) -> Path:
    """Rollout with a session header, one message and two token_count events."""
    return write_rollout(
        [
            {"timestamp": "2025-01-15T11:00:00.000Z", "type": "session_meta", "payload": {"id": "abc"}},
            _token_count_row(
                timestamp="2025-01-15T11:30:00.000Z",
                total_tokens=120_000,
                rate_limits={"primary": {"used_percent": 10.0, "window_minutes": 300}},
            ),
            {"timestamp": "2025-01-15T11:45:00.000Z", "type": "event_msg", "payload": {"type": "agent_message"}},
            _token_count_row(
                rate_limits={
                    "primary": {"used_percent": 42.0, "window_minutes": 300, "resets_in_seconds": 1000},
                    "secondary": {"used_percent": 12.5, "window_minutes": 10080, "resets_in_seconds": 259200},
                },
            ),
        ]
    )
