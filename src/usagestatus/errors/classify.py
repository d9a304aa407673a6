"""Exception classification for structured error handling."""

from __future__ import annotations

import tomllib

import msgspec

from usagestatus.errors.types import (
    ErrorCategory,
    ErrorSeverity,
    NoUsageDataError,
    UsageStatusError,
)


def classify_exception(e: Exception) -> UsageStatusError:
    """Classify any exception into a structured error."""

    if isinstance(e, NoUsageDataError):
        details = {"path": str(e.path)} if e.path is not None else None
        return UsageStatusError(
            message=str(e),
            category=ErrorCategory.NO_DATA,
            severity=ErrorSeverity.WARNING,
            remediation="Run a Codex session first, or pass a rollout file explicitly.",
            details=details,
        )

    # Configuration errors
    if isinstance(e, msgspec.ValidationError):
        return UsageStatusError(
            message=f"Invalid configuration: {e}",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
            remediation="Fix the value in config.toml or remove it to use the default.",
        )

    if isinstance(e, tomllib.TOMLDecodeError):
        return UsageStatusError(
            message=f"Failed to parse config file: {e}",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
            remediation="Check config.toml for TOML syntax errors.",
        )

    # Parse errors
    if isinstance(e, msgspec.DecodeError):
        return UsageStatusError(
            message="Failed to parse session telemetry",
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.RECOVERABLE,
            details={"error": str(e)},
        )

    if isinstance(e, (KeyError, ValueError, TypeError)):
        return UsageStatusError(
            message=f"Invalid telemetry format: {e}",
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.RECOVERABLE,
        )

    # File errors
    if isinstance(e, FileNotFoundError):
        filename = getattr(e, "filename", None)
        return UsageStatusError(
            message=f"File not found: {filename}" if filename else "File not found",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.RECOVERABLE,
            remediation="Check the rollout path or the configured Codex home.",
        )

    if isinstance(e, PermissionError):
        filename = getattr(e, "filename", None)
        return UsageStatusError(
            message=f"Permission denied: {filename}"
            if filename
            else "Permission denied",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
            remediation="Check file permissions for the Codex sessions directory.",
        )

    # Unknown
    return UsageStatusError(
        message=str(e),
        category=ErrorCategory.UNKNOWN,
        severity=ErrorSeverity.RECOVERABLE,
        details={"type": type(e).__name__},
    )
