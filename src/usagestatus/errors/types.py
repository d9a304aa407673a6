"""Error types and classifications."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from pathlib import Path

import msgspec


class ErrorCategory(StrEnum):
    """Error categories for handling decisions."""

    PARSE = "parse"
    NOT_FOUND = "not_found"
    NO_DATA = "no_data"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class ErrorSeverity(StrEnum):
    """Error severity levels."""

    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class UsageStatusError(msgspec.Struct, frozen=True):
    """Structured error with category and remediation."""

    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    remediation: str | None = None
    details: dict | None = None
    timestamp: datetime = msgspec.field(
        default_factory=lambda: datetime.now().astimezone()
    )


class NoUsageDataError(Exception):
    """Raised when no usage telemetry could be located."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path
