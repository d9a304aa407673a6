"""Codex session telemetry.

Codex writes one JSONL "rollout" file per session. Rows whose payload type is
``token_count`` carry token totals and rate-limit windows::

    {
        "timestamp": "2025-01-15T12:00:00.000Z",
        "type": "event_msg",
        "payload": {
            "type": "token_count",
            "info": {
                "total_token_usage": {"total_tokens": 48211},
                "last_token_usage": {"total_tokens": 51377},
                "model_context_window": 272000
            },
            "rate_limits": {
                "primary": {"used_percent": 42.0, "window_minutes": 300, "resets_in_seconds": 9000},
                "secondary": {"used_percent": 12.5, "window_minutes": 10080, "resets_at": 1737331200}
            }
        }
    }

Older CLI versions flatten the windows (``primary_used_percent``,
``primary_window_minutes``, ``primary_resets_in_seconds``); both shapes are
accepted.
"""

from __future__ import annotations

import math
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from pathlib import Path
from typing import Any

import msgspec
from loguru import logger

TOKEN_COUNT_EVENT = "token_count"
ROLLOUT_GLOB = "rollout-*.jsonl"


class TokenUsageSnapshot(msgspec.Struct, frozen=True):
    """Token and rate-limit readings from a single ``token_count`` event."""

    timestamp: datetime
    total_tokens: int | None = None
    context_window: int | None = None
    primary_percent: float | None = None
    primary_window_minutes: int | None = None
    primary_reset_at: datetime | None = None
    secondary_percent: float | None = None
    secondary_window_minutes: int | None = None
    secondary_reset_at: datetime | None = None


class RateWindow(msgspec.Struct, frozen=True):
    """One rate-limit window extracted from a ``rate_limits`` object."""

    used_percent: float | None = None
    window_minutes: int | None = None
    reset_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.used_percent is None
            and self.window_minutes is None
            and self.reset_at is None
        )


def _as_float(value: Any) -> float | None:
    """Coerce JSON numbers and numeric strings; anything else is None.

    NaN and infinities ("nan", "inf", 1e999) are not numbers here either.
    """
    if isinstance(value, (bool, int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _dig(root: Any, *keys: str) -> Any:
    current = root
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def parse_rate_window(
    rate_limits: Any,
    prefix: str,
    timestamp: datetime,
) -> RateWindow:
    """Extract the ``prefix`` window ("primary" or "secondary").

    An absolute ``resets_at`` (epoch seconds) wins over ``resets_in_seconds``,
    which is relative to the event timestamp.
    """
    if not isinstance(rate_limits, dict):
        return RateWindow()

    nested = rate_limits.get(prefix)
    if isinstance(nested, dict):
        values = nested
    else:
        values = {
            "used_percent": rate_limits.get(f"{prefix}_used_percent"),
            "window_minutes": rate_limits.get(f"{prefix}_window_minutes"),
            "resets_in_seconds": rate_limits.get(f"{prefix}_resets_in_seconds"),
            "resets_at": rate_limits.get(f"{prefix}_resets_at"),
        }

    reset_at = None
    if (resets_at := _as_float(values.get("resets_at"))) is not None:
        try:
            reset_at = datetime.fromtimestamp(resets_at, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug("Ignoring out-of-range {} reset timestamp {}", prefix, resets_at)
    elif (resets_in := _as_float(values.get("resets_in_seconds"))) is not None:
        try:
            reset_at = timestamp + timedelta(seconds=resets_in)
        except (OverflowError, ValueError):
            logger.debug("Ignoring out-of-range {} reset offset {}", prefix, resets_in)

    return RateWindow(
        used_percent=_as_float(values.get("used_percent")),
        window_minutes=_as_int(values.get("window_minutes")),
        reset_at=reset_at,
    )


def build_token_usage_snapshot(
    timestamp: datetime,
    payload: dict[str, Any],
) -> TokenUsageSnapshot | None:
    """Build a snapshot from a ``token_count`` payload.

    Returns None when the payload carries neither token counts nor any
    rate-limit data.
    """
    info = payload.get("info")
    total_tokens = _as_int(_dig(info, "last_token_usage", "total_tokens"))
    if total_tokens is None:
        total_tokens = _as_int(_dig(info, "total_token_usage", "total_tokens"))
    context_window = _as_int(_dig(info, "model_context_window"))

    rate_limits = payload.get("rate_limits")
    primary = parse_rate_window(rate_limits, "primary", timestamp)
    secondary = parse_rate_window(rate_limits, "secondary", timestamp)

    if (
        total_tokens is None
        and context_window is None
        and primary.is_empty
        and secondary.is_empty
    ):
        return None

    return TokenUsageSnapshot(
        timestamp=timestamp,
        total_tokens=total_tokens,
        context_window=context_window,
        primary_percent=primary.used_percent,
        primary_window_minutes=primary.window_minutes,
        primary_reset_at=primary.reset_at,
        secondary_percent=secondary.used_percent,
        secondary_window_minutes=secondary.window_minutes,
        secondary_reset_at=secondary.reset_at,
    )


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_rollout_line(line: str | bytes) -> TokenUsageSnapshot | None:
    """Parse one rollout row, returning a snapshot for ``token_count`` events."""
    try:
        row = msgspec.json.decode(line)
    except msgspec.DecodeError:
        logger.debug("Skipping malformed rollout line")
        return None

    if not isinstance(row, dict):
        return None

    payload = row.get("payload")
    if not isinstance(payload, dict):
        return None

    event_type = payload.get("type")
    if not isinstance(event_type, str) or event_type.lower() != TOKEN_COUNT_EVENT:
        return None

    timestamp = parse_timestamp(row.get("timestamp"))
    if timestamp is None:
        logger.debug("Skipping token_count event without a valid timestamp")
        return None

    return build_token_usage_snapshot(timestamp, payload)


def load_latest_token_usage(path: Path) -> TokenUsageSnapshot | None:
    """Return the last token usage snapshot recorded in a rollout file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    latest = None
    count = 0
    with path.open("rb") as f:
        for raw in f:
            line = raw.rstrip(b"\r\n")
            if not line:
                continue
            if (snapshot := parse_rollout_line(line)) is not None:
                latest = snapshot
                count += 1

    logger.debug("Found {} token_count events in {}", count, path)
    return latest


def list_rollouts(sessions_dir: Path, limit: int | None = None) -> list[Path]:
    """Return rollout files under ``sessions_dir``, newest first."""
    if not sessions_dir.is_dir():
        return []

    rollouts = sorted(
        (p for p in sessions_dir.rglob(ROLLOUT_GLOB) if p.is_file()),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    if limit is not None:
        rollouts = rollouts[:limit]
    return rollouts


def find_latest_rollout(sessions_dir: Path) -> Path | None:
    """Return the most recently modified rollout file, if any."""
    rollouts = list_rollouts(sessions_dir, limit=1)
    return rollouts[0] if rollouts else None
