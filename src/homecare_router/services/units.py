"""Unit conversion and display rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round2(value: float) -> float:
    """Round half-up to two decimals using the shortest decimal repr of ``value``.

    ``round(12.345, 2)`` works on the binary float and may give 12.34.
    """
    return float(Decimal(repr(float(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def meters_to_km(meters: float) -> float:
    return round2(float(meters) / 1000.0)


def seconds_to_minutes(seconds: float) -> float:
    return round2(float(seconds) / 60.0)
