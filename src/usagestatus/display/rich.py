"""Rich-based rendering utilities for usagestatus."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone
from typing import Literal

from rich.console import Console, ConsoleOptions, RenderResult
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from usagestatus.formatters import format_duration
from usagestatus.models import Availability
from usagestatus.models import UsageMetricSnapshot
from usagestatus.models import UsageProviderSnapshot

ResetFormat = Literal["countdown", "absolute"]


def progress_color(progress: float | None) -> str:
    """Pick a bar color from the fraction used."""
    if progress is None:
        return "dim"
    if progress < 0.5:
        return "green"
    elif progress < 0.8:
        return "yellow"
    else:
        return "red"


def render_progress_bar(
    progress: float | None,
    width: int = 20,
    color: str | None = None,
) -> Text:
    """Render a usage progress bar.

    Args:
        progress: Fraction used; values outside [0, 1] are drawn clamped
        width: Bar width in characters
        color: Optional color override

    Returns:
        Rich Text with the progress bar
    """
    fraction = 0.0 if progress is None else max(0.0, min(progress, 1.0))
    filled = int(fraction * width)
    bar = "█" * filled + "░" * (width - filled)

    text = Text()
    text.append(bar, style=color or progress_color(progress))
    return text


def format_reset_countdown(delta: timedelta | None) -> str:
    """Format reset time as countdown string."""
    if delta is None:
        return ""

    total_seconds = int(delta.total_seconds())
    if total_seconds <= 0:
        return "now"

    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60

    if days > 0:
        return f"{days}d {hours}h"
    elif hours > 0:
        return f"{hours}h {minutes}m"
    else:
        return f"{minutes}m"


def format_reset(
    metric: UsageMetricSnapshot,
    now: datetime | None = None,
    reset_format: ResetFormat = "countdown",
) -> str:
    """Describe when a metric resets.

    Without a reset time the window length is shown instead, so the reader
    still knows the period the limit covers.
    """
    if metric.reset_at is not None:
        if reset_format == "absolute":
            return f"resets {metric.reset_at.astimezone():%a %H:%M}"
        now = now or datetime.now(timezone.utc)
        countdown = format_reset_countdown(metric.reset_at - now)
        if countdown == "now":
            return "resets now"
        return f"resets in {countdown}"

    if metric.fallback_window_minutes:
        return f"{format_duration(metric.fallback_window_minutes)} window"

    return ""


def format_metric(
    metric: UsageMetricSnapshot,
    width: int = 20,
    now: datetime | None = None,
    reset_format: ResetFormat = "countdown",
) -> Text:
    """Format a metric as a single line.

    Args:
        metric: Metric to format
        width: Progress bar width
        now: Reference time for countdowns
        reset_format: "countdown" or "absolute"

    Returns:
        Rich Text with label, bar, percentage, usage and reset info
    """
    text = Text()
    text.append(f"{metric.label:<13}", style="bold")
    text.append_text(render_progress_bar(metric.progress, width=width))
    text.append(" ")
    text.append(f"{metric.percent_text or '--':>4}", style="bold")

    if metric.usage_text:
        text.append(f"  {metric.usage_text}", style="dim")

    if reset := format_reset(metric, now=now, reset_format=reset_format):
        text.append(f" • {reset}", style="dim")

    return text


class ProviderSnapshotPanel:
    """Rich renderable showing one provider snapshot in a panel."""

    def __init__(
        self,
        snapshot: UsageProviderSnapshot,
        bar_width: int = 20,
        reset_format: ResetFormat = "countdown",
        now: datetime | None = None,
    ):
        self.snapshot = snapshot
        self.bar_width = bar_width
        self.reset_format = reset_format
        self.now = now

    def __rich_console__(
        self, console: Console, options: ConsoleOptions
    ) -> RenderResult:
        snapshot = self.snapshot
        accent = snapshot.provider.accent_color

        if snapshot.availability is not Availability.READY or not snapshot.metrics:
            body: Text | Table = Text(
                snapshot.status_message or "No usage data", style="dim"
            )
        else:
            body = Table.grid(padding=(0, 2))
            body.add_column(min_width=12, justify="left")  # Label
            body.add_column(justify="left")  # Bar + percentage
            body.add_column(justify="left")  # Usage text
            body.add_column(justify="right")  # Reset

            for metric in snapshot.metrics:
                bar = render_progress_bar(metric.progress, width=self.bar_width)
                bar.append(f" {metric.percent_text or '--':>4}", style="bold")
                body.add_row(
                    Text(metric.label, style="bold"),
                    bar,
                    Text(metric.usage_text or "", style="dim"),
                    Text(
                        format_reset(metric, now=self.now, reset_format=self.reset_format),
                        style="dim",
                    ),
                )

        subtitle = None
        if snapshot.updated_at is not None:
            subtitle = f"updated {snapshot.updated_at.astimezone():%Y-%m-%d %H:%M}"

        yield Panel(
            body,
            title=f"[bold {accent}]{snapshot.title}[/]",
            subtitle=subtitle,
            border_style=accent,
            expand=False,
        )
