"""JSON output utilities for usagestatus."""

from __future__ import annotations

import sys

import msgspec

from usagestatus.errors.types import UsageStatusError
from usagestatus.models import UsageProviderSnapshot

__all__ = [
    "encode_json",
    "error_to_dict",
    "output_json",
    "output_json_error",
    "snapshot_to_dict",
]


def snapshot_to_dict(snapshot: UsageProviderSnapshot) -> dict:
    """Convert a provider snapshot to JSON-ready builtins.

    Datetimes become ISO 8601 strings and enums their values.
    """
    return msgspec.to_builtins(snapshot)


def error_to_dict(error: UsageStatusError) -> dict:
    """Convert a structured error to the ``{"error": {...}}`` payload."""
    data = {
        "message": error.message,
        "category": error.category.value,
        "severity": error.severity.value,
        "timestamp": error.timestamp.isoformat(),
    }
    if error.remediation:
        data["remediation"] = error.remediation
    if error.details:
        data["details"] = error.details
    return {"error": data}


def encode_json(data: object) -> bytes:
    """Encode data as JSON bytes.

    Args:
        data: Any msgspec-serializable object

    Returns:
        JSON-encoded bytes
    """
    return msgspec.json.encode(data)


def output_json(data: object, indent: int = 2) -> None:
    """Output data as pretty-printed JSON to stdout.

    Args:
        data: Any msgspec-serializable object (Struct, dict, list, etc.)
        indent: Number of spaces for indentation
    """
    body = msgspec.json.format(encode_json(data), indent=indent)
    sys.stdout.write(body.decode())
    sys.stdout.write("\n")


def output_json_error(error: UsageStatusError, indent: int = 2) -> None:
    """Output a structured error in JSON format."""
    output_json(error_to_dict(error), indent=indent)
