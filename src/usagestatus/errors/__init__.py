"""Error handling for usagestatus."""

from usagestatus.errors.classify import classify_exception
from usagestatus.errors.types import (
    ErrorCategory,
    ErrorSeverity,
    NoUsageDataError,
    UsageStatusError,
)

__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "NoUsageDataError",
    "UsageStatusError",
    "classify_exception",
]
