"""Provider-agnostic usage snapshot models.

These are the shapes a renderer consumes. Provider-specific status types
(e.g. :class:`usagestatus.status.UsageStatus`) convert themselves into a
:class:`UsageProviderSnapshot`.
"""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from enum import StrEnum

import msgspec


class UsageProviderKind(StrEnum):
    """Known usage providers."""

    CODEX = "codex"
    CLAUDE = "claude"
    GEMINI = "gemini"

    @property
    def display_name(self) -> str:
        """Return the human-readable provider name."""
        match self:
            case UsageProviderKind.CODEX:
                return "Codex"
            case UsageProviderKind.CLAUDE:
                return "Claude"
            case UsageProviderKind.GEMINI:
                return "Gemini"

    @property
    def accent_color(self) -> str:
        """Return the rich color used to accent this provider."""
        match self:
            case UsageProviderKind.CODEX:
                return "cyan"
            case UsageProviderKind.CLAUDE:
                return "magenta"
            case UsageProviderKind.GEMINI:
                return "dark_cyan"


class MetricKind(StrEnum):
    """What a metric measures."""

    CONTEXT = "context"
    FIVE_HOUR = "five_hour"
    WEEKLY = "weekly"
    SESSION_EXPIRY = "session_expiry"
    QUOTA = "quota"
    SNAPSHOT = "snapshot"


class Availability(StrEnum):
    """Whether a provider snapshot carries data."""

    READY = "ready"
    EMPTY = "empty"
    COMING_SOON = "coming_soon"


class UsageProviderOrigin(StrEnum):
    """Where a provider integration comes from."""

    BUILTIN = "builtin"
    THIRD_PARTY = "third_party"


class ProviderAction(StrEnum):
    """Follow-up action a renderer may offer."""

    REFRESH = "refresh"
    AUTHORIZE_KEYCHAIN = "authorize_keychain"


class UsageMetricSnapshot(msgspec.Struct, frozen=True):
    """A single displayable usage metric."""

    kind: MetricKind
    label: str  # Display label (e.g., "5h limit")
    usage_text: str | None = None  # e.g., "2.9h remaining"
    percent_text: str | None = None  # e.g., "42%"
    progress: float | None = None  # Fraction used, may exceed 1.0
    reset_at: datetime | None = None  # Only set when in the future
    fallback_window_minutes: int | None = None  # Window length when reset is unknown


class UsageProviderSnapshot(msgspec.Struct, frozen=True):
    """Everything a renderer needs to show one provider."""

    provider: UsageProviderKind
    title: str
    availability: Availability
    metrics: tuple[UsageMetricSnapshot, ...] = ()
    updated_at: datetime | None = None
    status_message: str | None = None
    requires_reauth: bool = False
    origin: UsageProviderOrigin = UsageProviderOrigin.BUILTIN
    action: ProviderAction | None = None

    def urgent_metric(self, now: datetime | None = None) -> UsageMetricSnapshot | None:
        """Return the metric closest to limiting the user.

        Context and snapshot metrics are ignored. Candidates are ordered by
        reset time (known resets before unknown ones, five-hour windows
        winning ties), and quota metrics are reordered among themselves so
        the lowest remaining progress comes first. The first
        metric with a future reset, or with a usable fallback window, is
        returned; otherwise the first candidate.
        """
        now = now or datetime.now(timezone.utc)
        candidates = [
            m
            for m in self.metrics
            if m.kind not in (MetricKind.SNAPSHOT, MetricKind.CONTEXT)
        ]
        ordered = sorted(candidates, key=_reset_sort_key)

        # Quota metrics trade places among themselves by lowest progress
        slots = [i for i, m in enumerate(ordered) if m.kind == MetricKind.QUOTA]
        by_progress = sorted(
            (ordered[i] for i in slots),
            key=lambda m: m.progress if m.progress is not None else 1.0,
        )
        for slot, metric in zip(slots, by_progress):
            ordered[slot] = metric

        for metric in ordered:
            if metric.reset_at is not None:
                if metric.reset_at > now:
                    return metric
            elif metric.fallback_window_minutes and metric.fallback_window_minutes > 0:
                return metric

        return ordered[0] if ordered else None

    @classmethod
    def placeholder(
        cls,
        provider: UsageProviderKind,
        message: str,
        action: ProviderAction | None = ProviderAction.REFRESH,
    ) -> UsageProviderSnapshot:
        """Snapshot shown while a provider has no data to offer."""
        return cls(
            provider=provider,
            title=provider.display_name,
            availability=Availability.COMING_SOON,
            metrics=(),
            updated_at=None,
            status_message=message,
            origin=UsageProviderOrigin.BUILTIN,
            action=action,
        )


def _reset_sort_key(metric: UsageMetricSnapshot) -> tuple[int, float, bool]:
    """Known resets first (earliest wins), five-hour windows break ties."""
    not_five_hour = metric.kind != MetricKind.FIVE_HOUR
    if metric.reset_at is None:
        return (1, 0.0, not_five_hour)
    return (0, metric.reset_at.timestamp(), not_five_hour)
