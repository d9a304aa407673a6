"""Main CLI application for usagestatus."""

from __future__ import annotations

import sys
from enum import IntEnum
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from usagestatus.config.paths import sessions_dir
from usagestatus.config.settings import Config, load_config
from usagestatus.display.json import output_json, output_json_error, snapshot_to_dict
from usagestatus.display.rich import ProviderSnapshotPanel, format_metric
from usagestatus.errors import (
    ErrorCategory,
    NoUsageDataError,
    UsageStatusError,
    classify_exception,
)
from usagestatus.status import UsageStatus
from usagestatus.telemetry import find_latest_rollout, list_rollouts, load_latest_token_usage

app = typer.Typer(
    name="usagestatus",
    help="Show Codex context and rate-limit usage",
    add_completion=False,
    no_args_is_help=False,
    invoke_without_command=True,
)


class ExitCode(IntEnum):
    """Exit codes for usagestatus."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    PARSE_ERROR = 2
    NOT_FOUND = 3
    CONFIG_ERROR = 4
    NO_DATA = 5


EXIT_CODES: dict[ErrorCategory, ExitCode] = {
    ErrorCategory.PARSE: ExitCode.PARSE_ERROR,
    ErrorCategory.NOT_FOUND: ExitCode.NOT_FOUND,
    ErrorCategory.CONFIGURATION: ExitCode.CONFIG_ERROR,
    ErrorCategory.NO_DATA: ExitCode.NO_DATA,
    ErrorCategory.UNKNOWN: ExitCode.GENERAL_ERROR,
}


def configure_logging(verbose: bool = False) -> None:
    """Route library logs to stderr; DEBUG when verbose, WARNING otherwise."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    logger.enable("usagestatus")


@app.callback()
def main(
    ctx: typer.Context,
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Usagestatus - Show Codex context and rate-limit usage."""
    if version:
        from usagestatus import __version__

        typer.echo(f"usagestatus {__version__}")
        raise typer.Exit()

    configure_logging(verbose)

    ctx.meta["no_color"] = no_color
    ctx.meta["verbose"] = verbose

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _make_console(ctx: typer.Context, config: Config | None = None) -> Console:
    colors = config.display.colors if config is not None else True
    return Console(no_color=ctx.meta.get("no_color", False) or not colors)


def _fail(console: Console, error: UsageStatusError, json_mode: bool) -> None:
    """Report a structured error and exit with the mapped code."""
    if json_mode:
        output_json_error(error)
    else:
        console.print(f"[red]Error:[/red] {error.message}")
        if error.remediation:
            console.print(f"[dim]{error.remediation}[/dim]")
    raise typer.Exit(EXIT_CODES.get(error.category, ExitCode.GENERAL_ERROR))


def load_status(path: Path | None, config: Config) -> UsageStatus:
    """Load the usage status from ``path`` or the newest Codex rollout.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        NoUsageDataError: If no rollout or no token usage event is found.
    """
    if path is None:
        directory = sessions_dir(config.sessions.codex_home)
        path = find_latest_rollout(directory)
        if path is None:
            raise NoUsageDataError("No Codex session rollouts found", directory)

    logger.debug("Reading token usage from {}", path)
    usage = load_latest_token_usage(path)
    if usage is None:
        raise NoUsageDataError(f"No token usage recorded in {path.name}", path)

    return UsageStatus.from_token_usage(usage)


@app.command("show")
def show_command(
    ctx: typer.Context,
    path: Path = typer.Argument(
        None,
        help="Rollout file to read (default: newest Codex session)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="One line per metric, no panel"
    ),
) -> None:
    """Show context and rate-limit usage for a Codex session."""
    console = _make_console(ctx)

    try:
        config = load_config()
        status = load_status(path, config)
    except Exception as e:
        _fail(console, classify_exception(e), json_output)

    snapshot = status.as_provider_snapshot()

    if json_output:
        output_json(snapshot_to_dict(snapshot))
        return

    console = _make_console(ctx, config)
    if quiet:
        for metric in snapshot.metrics:
            console.print(
                format_metric(
                    metric,
                    width=config.display.bar_width,
                    reset_format=config.display.reset_format,
                )
            )
        return

    console.print(
        ProviderSnapshotPanel(
            snapshot,
            bar_width=config.display.bar_width,
            reset_format=config.display.reset_format,
        )
    )


@app.command("sessions")
def sessions_command(
    ctx: typer.Context,
    limit: int = typer.Option(
        None, "--limit", "-n", min=1, help="Number of rollouts to list"
    ),
) -> None:
    """List recent Codex session rollouts."""
    console = _make_console(ctx)

    try:
        config = load_config()
    except Exception as e:
        _fail(console, classify_exception(e), json_mode=False)

    directory = sessions_dir(config.sessions.codex_home)
    if limit is None:
        limit = config.sessions.recent_limit
    rollouts = list_rollouts(directory, limit=limit)
    if not rollouts:
        console.print(f"[dim]No rollouts found in {directory}[/dim]")
        raise typer.Exit(ExitCode.NO_DATA)

    for rollout in rollouts:
        console.print(str(rollout))


def run_app() -> None:
    """Run the CLI app."""
    app()
