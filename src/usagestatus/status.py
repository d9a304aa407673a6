"""Codex usage status: raw quota counters and their display derivations.

Every derived property returns None when its inputs are missing instead of
raising. Naive datetimes are read as UTC before reset times are compared,
matching how the telemetry adapter parses rollout timestamps.
"""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import TYPE_CHECKING

import msgspec

from usagestatus.formatters import format_duration
from usagestatus.formatters import format_percent
from usagestatus.formatters import format_tokens
from usagestatus.models import Availability
from usagestatus.models import MetricKind
from usagestatus.models import UsageMetricSnapshot
from usagestatus.models import UsageProviderKind
from usagestatus.models import UsageProviderOrigin
from usagestatus.models import UsageProviderSnapshot

if TYPE_CHECKING:
    from usagestatus.telemetry import TokenUsageSnapshot


class UsageStatus(msgspec.Struct, frozen=True):
    """Point-in-time Codex quota snapshot.

    Window percentages are on a 0-100 scale and are not clamped here.
    Equality compares the raw fields only.
    """

    updated_at: datetime
    context_used_tokens: int | None = None
    context_limit_tokens: int | None = None
    primary_window_used_percent: float | None = None  # 5-hour window
    primary_window_minutes: int | None = None
    primary_reset_at: datetime | None = None
    secondary_window_used_percent: float | None = None  # Weekly window
    secondary_window_minutes: int | None = None
    secondary_reset_at: datetime | None = None

    @classmethod
    def from_token_usage(cls, snapshot: TokenUsageSnapshot) -> UsageStatus:
        """Build a status from a telemetry snapshot, field for field."""
        return cls(
            updated_at=snapshot.timestamp,
            context_used_tokens=snapshot.total_tokens,
            context_limit_tokens=snapshot.context_window,
            primary_window_used_percent=snapshot.primary_percent,
            primary_window_minutes=snapshot.primary_window_minutes,
            primary_reset_at=snapshot.primary_reset_at,
            secondary_window_used_percent=snapshot.secondary_percent,
            secondary_window_minutes=snapshot.secondary_window_minutes,
            secondary_reset_at=snapshot.secondary_reset_at,
        )

    # Context window

    @property
    def context_used_percent(self) -> float | None:
        """Return used/limit as a ratio, unclamped."""
        used = self.context_used_tokens
        limit = self.context_limit_tokens
        if used is None or limit is None or limit <= 0:
            return None
        return used / limit

    @property
    def context_usage_text(self) -> str | None:
        if self.context_used_tokens is None or self.context_limit_tokens is None:
            return None
        used = format_tokens(self.context_used_tokens)
        limit = format_tokens(self.context_limit_tokens)
        return f"{used} used / {limit} total"

    @property
    def context_percent_text(self) -> str | None:
        percent = self.context_used_percent
        if percent is None:
            return None
        return format_percent(percent)

    @property
    def context_progress(self) -> float | None:
        return self.context_used_percent

    # Rate-limit windows

    @property
    def primary_percent_text(self) -> str | None:
        return _window_percent_text(self.primary_window_used_percent)

    @property
    def secondary_percent_text(self) -> str | None:
        return _window_percent_text(self.secondary_window_used_percent)

    @property
    def primary_usage_text(self) -> str | None:
        return _window_usage_text(
            self.primary_window_used_percent, self.primary_window_minutes
        )

    @property
    def secondary_usage_text(self) -> str | None:
        return _window_usage_text(
            self.secondary_window_used_percent, self.secondary_window_minutes
        )

    @property
    def primary_progress(self) -> float | None:
        """Return the 5-hour usage as a fraction.

        Not clamped: an upstream percent above 100 yields progress above 1.
        """
        return _window_progress(self.primary_window_used_percent)

    @property
    def secondary_progress(self) -> float | None:
        """Return the weekly usage as a fraction (unclamped, see primary)."""
        return _window_progress(self.secondary_window_used_percent)

    @property
    def valid_primary_reset_at(self) -> datetime | None:
        """Return the 5-hour reset time if it is after ``updated_at``."""
        return self._future_reset(self.primary_reset_at)

    @property
    def valid_secondary_reset_at(self) -> datetime | None:
        """Return the weekly reset time if it is after ``updated_at``."""
        return self._future_reset(self.secondary_reset_at)

    def _future_reset(self, reset: datetime | None) -> datetime | None:
        if reset is None:
            return None
        reset = _as_utc(reset)
        if reset <= _as_utc(self.updated_at):
            return None
        return reset

    def as_provider_snapshot(self) -> UsageProviderSnapshot:
        """Convert into the generic provider snapshot.

        Always three metrics in order: context, 5-hour, weekly.
        """
        metrics = (
            UsageMetricSnapshot(
                kind=MetricKind.CONTEXT,
                label="Context",
                usage_text=self.context_usage_text,
                percent_text=self.context_percent_text,
                progress=self.context_progress,
                reset_at=None,
                fallback_window_minutes=None,
            ),
            UsageMetricSnapshot(
                kind=MetricKind.FIVE_HOUR,
                label="5h limit",
                usage_text=self.primary_usage_text,
                percent_text=self.primary_percent_text,
                progress=self.primary_progress,
                reset_at=self.valid_primary_reset_at,
                fallback_window_minutes=self.primary_window_minutes,
            ),
            UsageMetricSnapshot(
                kind=MetricKind.WEEKLY,
                label="Weekly limit",
                usage_text=self.secondary_usage_text,
                percent_text=self.secondary_percent_text,
                progress=self.secondary_progress,
                reset_at=self.valid_secondary_reset_at,
                fallback_window_minutes=self.secondary_window_minutes,
            ),
        )

        return UsageProviderSnapshot(
            provider=UsageProviderKind.CODEX,
            title=UsageProviderKind.CODEX.display_name,
            availability=Availability.READY,
            metrics=metrics,
            updated_at=self.updated_at,
            status_message=None,
            origin=UsageProviderOrigin.BUILTIN,
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def remaining_window_minutes(percent: float, minutes: int) -> float:
    """Return minutes left in a window, always within [0, minutes]."""
    used_minutes = max(0.0, min(percent, 100.0)) / 100.0 * minutes
    return max(0.0, minutes - used_minutes)


def _window_percent_text(percent: float | None) -> str | None:
    if percent is None:
        return None
    return format_percent(percent / 100.0)


def _window_usage_text(percent: float | None, minutes: int | None) -> str | None:
    if percent is None or minutes is None:
        return None
    return f"{format_duration(remaining_window_minutes(percent, minutes))} remaining"


def _window_progress(percent: float | None) -> float | None:
    if percent is None:
        return None
    return percent / 100.0
