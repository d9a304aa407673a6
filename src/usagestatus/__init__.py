"""usagestatus: Codex context and rate-limit usage at a glance."""

from __future__ import annotations

__version__ = "0.1.0"

from loguru import logger

from usagestatus.formatters import COMPACT_PERCENT_FORMAT
from usagestatus.formatters import DECIMAL_FORMAT
from usagestatus.formatters import format_duration
from usagestatus.formatters import format_percent
from usagestatus.formatters import format_tokens
from usagestatus.models import Availability
from usagestatus.models import MetricKind
from usagestatus.models import UsageMetricSnapshot
from usagestatus.models import UsageProviderKind
from usagestatus.models import UsageProviderOrigin
from usagestatus.models import UsageProviderSnapshot
from usagestatus.status import UsageStatus
from usagestatus.telemetry import TokenUsageSnapshot

# Silent unless an application opts in (the CLI does)
logger.disable("usagestatus")

__all__ = [
    "__version__",
    "UsageStatus",
    "TokenUsageSnapshot",
    "UsageProviderKind",
    "MetricKind",
    "Availability",
    "UsageProviderOrigin",
    "UsageMetricSnapshot",
    "UsageProviderSnapshot",
    "DECIMAL_FORMAT",
    "COMPACT_PERCENT_FORMAT",
    "format_tokens",
    "format_duration",
    "format_percent",
]


def main() -> None:
    """Entry point for the usagestatus CLI."""
    from usagestatus.cli.app import run_app

    run_app()
