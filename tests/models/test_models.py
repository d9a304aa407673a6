"""Tests for usagestatus.models data structures."""
from __future__ import annotations

from datetime import datetime
from datetime import timedelta

import pytest

from usagestatus.models import Availability
from usagestatus.models import MetricKind
from usagestatus.models import ProviderAction
from usagestatus.models import UsageMetricSnapshot
from usagestatus.models import UsageProviderKind
from usagestatus.models import UsageProviderOrigin
from usagestatus.models import UsageProviderSnapshot


def _snapshot(*metrics: UsageMetricSnapshot) -> UsageProviderSnapshot:
    return UsageProviderSnapshot(
        provider=UsageProviderKind.CODEX,
        title="Codex",
        availability=Availability.READY,
        metrics=metrics,
    )


class TestUsageProviderKind:
    """Tests for UsageProviderKind enum."""

    def test_values(self):
        """UsageProviderKind has correct values."""
        assert UsageProviderKind.CODEX == "codex"
        assert UsageProviderKind.CLAUDE == "claude"
        assert UsageProviderKind.GEMINI == "gemini"

    @pytest.mark.parametrize(
        "kind,name",
        [
            (UsageProviderKind.CODEX, "Codex"),
            (UsageProviderKind.CLAUDE, "Claude"),
            (UsageProviderKind.GEMINI, "Gemini"),
        ],
    )
    def test_display_name(self, kind, name):
        """Each provider has a display name."""
        assert kind.display_name == name

    def test_accent_colors_distinct(self):
        """Each provider has its own accent color."""
        colors = {kind.accent_color for kind in UsageProviderKind}
        assert len(colors) == len(UsageProviderKind)


class TestUsageMetricSnapshot:
    """Tests for UsageMetricSnapshot."""

    def test_defaults(self):
        """Only kind and label are required."""
        metric = UsageMetricSnapshot(kind=MetricKind.CONTEXT, label="Context")

        assert metric.usage_text is None
        assert metric.percent_text is None
        assert metric.progress is None
        assert metric.reset_at is None
        assert metric.fallback_window_minutes is None

    def test_structural_equality(self):
        """Metrics with equal fields are equal."""
        a = UsageMetricSnapshot(kind=MetricKind.WEEKLY, label="Weekly limit", progress=0.1)
        b = UsageMetricSnapshot(kind=MetricKind.WEEKLY, label="Weekly limit", progress=0.1)
        assert a == b


class TestUrgentMetric:
    """Tests for UsageProviderSnapshot.urgent_metric."""

    def test_earliest_future_reset(
        self, sample_provider_snapshot: UsageProviderSnapshot, utc_now: datetime
    ):
        """The five-hour window resetting first is most urgent."""
        metric = sample_provider_snapshot.urgent_metric(now=utc_now)
        assert metric is not None
        assert metric.kind == MetricKind.FIVE_HOUR

    def test_skips_elapsed_reset(self, utc_now: datetime):
        """A reset already past at ``now`` yields to a later one."""
        snapshot = _snapshot(
            UsageMetricSnapshot(
                kind=MetricKind.FIVE_HOUR,
                label="5h limit",
                reset_at=utc_now - timedelta(minutes=5),
            ),
            UsageMetricSnapshot(
                kind=MetricKind.WEEKLY,
                label="Weekly limit",
                reset_at=utc_now + timedelta(days=2),
            ),
        )
        assert snapshot.urgent_metric(now=utc_now).kind == MetricKind.WEEKLY

    def test_all_resets_elapsed_returns_first(
        self, sample_provider_snapshot: UsageProviderSnapshot, utc_now: datetime
    ):
        """With nothing in the future the earliest reset is returned."""
        metric = sample_provider_snapshot.urgent_metric(now=utc_now + timedelta(days=10))
        assert metric.kind == MetricKind.FIVE_HOUR

    def test_fallback_window_counts(self, utc_now: datetime):
        """A metric with only a window length qualifies."""
        snapshot = _snapshot(
            UsageMetricSnapshot(kind=MetricKind.WEEKLY, label="Weekly limit"),
            UsageMetricSnapshot(
                kind=MetricKind.FIVE_HOUR,
                label="5h limit",
                fallback_window_minutes=300,
            ),
        )
        assert snapshot.urgent_metric(now=utc_now).kind == MetricKind.FIVE_HOUR

    def test_five_hour_wins_ties(self, utc_now: datetime):
        """Without resets the five-hour window comes first."""
        snapshot = _snapshot(
            UsageMetricSnapshot(
                kind=MetricKind.WEEKLY,
                label="Weekly limit",
                fallback_window_minutes=10080,
            ),
            UsageMetricSnapshot(
                kind=MetricKind.FIVE_HOUR,
                label="5h limit",
                fallback_window_minutes=300,
            ),
        )
        assert snapshot.urgent_metric(now=utc_now).kind == MetricKind.FIVE_HOUR

    def test_known_reset_before_unknown(self, utc_now: datetime):
        """A metric with a reset outranks one without."""
        snapshot = _snapshot(
            UsageMetricSnapshot(
                kind=MetricKind.FIVE_HOUR,
                label="5h limit",
                fallback_window_minutes=300,
            ),
            UsageMetricSnapshot(
                kind=MetricKind.WEEKLY,
                label="Weekly limit",
                reset_at=utc_now + timedelta(days=5),
            ),
        )
        assert snapshot.urgent_metric(now=utc_now).kind == MetricKind.WEEKLY

    def test_lowest_quota_first(self, utc_now: datetime):
        """Among quota metrics the lowest progress wins."""
        snapshot = _snapshot(
            UsageMetricSnapshot(kind=MetricKind.QUOTA, label="Pro", progress=0.9),
            UsageMetricSnapshot(kind=MetricKind.QUOTA, label="Flash", progress=0.2),
        )
        assert snapshot.urgent_metric(now=utc_now).label == "Flash"

    def test_ignores_context_and_snapshot(self, utc_now: datetime):
        """Context and snapshot metrics are never urgent."""
        snapshot = _snapshot(
            UsageMetricSnapshot(kind=MetricKind.CONTEXT, label="Context", progress=0.99),
            UsageMetricSnapshot(
                kind=MetricKind.SNAPSHOT,
                label="Snapshot",
                reset_at=utc_now + timedelta(minutes=1),
            ),
        )
        assert snapshot.urgent_metric(now=utc_now) is None

    def test_no_metrics(self, utc_now: datetime):
        """An empty snapshot has no urgent metric."""
        assert _snapshot().urgent_metric(now=utc_now) is None


class TestPlaceholder:
    """Tests for UsageProviderSnapshot.placeholder."""

    def test_placeholder(self):
        """Placeholders carry a message and no data."""
        snapshot = UsageProviderSnapshot.placeholder(
            UsageProviderKind.GEMINI, message="Not signed in"
        )

        assert snapshot.provider == UsageProviderKind.GEMINI
        assert snapshot.title == "Gemini"
        assert snapshot.availability == Availability.COMING_SOON
        assert snapshot.metrics == ()
        assert snapshot.updated_at is None
        assert snapshot.status_message == "Not signed in"
        assert snapshot.origin == UsageProviderOrigin.BUILTIN
        assert snapshot.action == ProviderAction.REFRESH
        assert snapshot.requires_reauth is False

    def test_placeholder_custom_action(self):
        """The follow-up action can be overridden."""
        snapshot = UsageProviderSnapshot.placeholder(
            UsageProviderKind.CLAUDE,
            message="Keychain access needed",
            action=ProviderAction.AUTHORIZE_KEYCHAIN,
        )
        assert snapshot.action == ProviderAction.AUTHORIZE_KEYCHAIN
