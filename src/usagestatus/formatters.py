"""Compact number, token and duration formatting.

Formatting goes through the :class:`NumberFormatter` interface. The primary
implementation renders with ``Decimal`` half-even rounding and grouping
separators; when it cannot produce a string (non-finite input) callers fall
back to a fixed ``%``-pattern so the same value always yields some text.
"""

from __future__ import annotations

import math
from abc import ABC
from abc import abstractmethod
from decimal import ROUND_HALF_EVEN
from decimal import Decimal
from decimal import InvalidOperation
from enum import StrEnum

import msgspec

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440


class NumberStyle(StrEnum):
    """How a number is presented."""

    DECIMAL = "decimal"
    PERCENT = "percent"  # Value is a ratio, rendered x100 with a "%" suffix


class NumberFormat(msgspec.Struct, frozen=True):
    """Immutable number format configuration."""

    style: NumberStyle = NumberStyle.DECIMAL
    min_fraction_digits: int = 0
    max_fraction_digits: int = 0
    grouping_separator: str = ","
    decimal_separator: str = "."


# Shared, never mutated after import
DECIMAL_FORMAT = NumberFormat(style=NumberStyle.DECIMAL, max_fraction_digits=0)
COMPACT_PERCENT_FORMAT = NumberFormat(
    style=NumberStyle.PERCENT,
    min_fraction_digits=0,
    max_fraction_digits=0,
)


class NumberFormatter(ABC):
    """Renders numbers according to a :class:`NumberFormat`."""

    def __init__(self, fmt: NumberFormat):
        self.fmt = fmt

    @abstractmethod
    def format(self, value: float) -> str | None:
        """Return the formatted value, or None if it cannot be rendered."""


class LocaleNumberFormatter(NumberFormatter):
    """Primary formatter honoring separators and fraction digit bounds."""

    def format(self, value: float) -> str | None:
        if not math.isfinite(value):
            return None

        try:
            number = Decimal(str(value))
            if self.fmt.style is NumberStyle.PERCENT:
                number = number.scaleb(2)

            digits = self.fmt.max_fraction_digits
            rounded = number.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_EVEN)
        except InvalidOperation:
            return None

        if rounded.is_zero():
            rounded = abs(rounded)  # Avoid "-0"

        body = f"{rounded:,.{digits}f}"
        body = self._trim_fraction(body)
        body = body.translate(
            str.maketrans({",": self.fmt.grouping_separator, ".": self.fmt.decimal_separator})
        )

        if self.fmt.style is NumberStyle.PERCENT:
            return f"{body}%"
        return body

    def _trim_fraction(self, body: str) -> str:
        """Drop trailing zeros down to the minimum fraction digits."""
        if "." not in body:
            return body
        whole, fraction = body.split(".")
        while len(fraction) > self.fmt.min_fraction_digits and fraction.endswith("0"):
            fraction = fraction[:-1]
        return f"{whole}.{fraction}" if fraction else whole


class PatternNumberFormatter(NumberFormatter):
    """Fixed-pattern fallback using printf-style formatting."""

    def format(self, value: float) -> str | None:
        digits = self.fmt.max_fraction_digits
        if self.fmt.style is NumberStyle.PERCENT:
            return "%.*f%%" % (digits, value * 100)
        return "%.*f" % (digits, value)


def format_number(value: float, fmt: NumberFormat) -> str:
    """Format a number, falling back to the fixed pattern on failure."""
    text = LocaleNumberFormatter(fmt).format(value)
    if text is None:
        text = PatternNumberFormatter(fmt).format(value)
    return text


def format_percent(ratio: float) -> str:
    """Format a 0-1 ratio as a whole percentage (0.2 -> "20%")."""
    return format_number(ratio, COMPACT_PERCENT_FORMAT)


def format_tokens(value: int) -> str:
    """Format a token count compactly (1_234_567 -> "1.2M", 12_345 -> "12K").

    Values of 10 or more after scaling drop the fraction digit. Whole scaled
    values never show one (1000 -> "1K").
    """
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return _format_scaled(value, 1_000_000, "M")
    if magnitude >= 1_000:
        return _format_scaled(value, 1_000, "K")
    return LocaleNumberFormatter(DECIMAL_FORMAT).format(value) or str(value)


def _format_scaled(value: int, divisor: int, suffix: str) -> str:
    scaled = value / divisor
    digits = 1 if abs(scaled) < 10 else 0
    fmt = NumberFormat(
        style=NumberStyle.DECIMAL,
        min_fraction_digits=0 if scaled.is_integer() else digits,
        max_fraction_digits=digits,
    )
    return format_number(scaled, fmt) + suffix


def format_duration(minutes: float) -> str:
    """Format a minute count in its largest sensible unit.

    Days from 1440 minutes, hours from 60, otherwise whole minutes. Values
    below 10 in days or hours keep one decimal ("3.5d", "7.5h", "14h").
    """
    if minutes >= MINUTES_PER_DAY:
        return _with_unit(minutes / MINUTES_PER_DAY, "d")
    if minutes >= MINUTES_PER_HOUR:
        return _with_unit(minutes / MINUTES_PER_HOUR, "h")
    return "%.0fm" % minutes


def _with_unit(amount: float, unit: str) -> str:
    if amount >= 10:
        return "%.0f%s" % (amount, unit)
    return "%.1f%s" % (amount, unit)
