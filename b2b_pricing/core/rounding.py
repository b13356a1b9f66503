"""Decimal rounding helpers shared by every calculation stage."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")
ONE_PLACE = Decimal("0.1")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Convert a numeric value to Decimal without binary float drift."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round2(value: Decimal | int | float | str | None) -> Decimal:
    """Round a monetary amount to 2 places, half away from zero."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round1(value: Decimal | int | float | str | None) -> Decimal:
    """Round a percentage to 1 place, half away from zero."""
    return to_decimal(value).quantize(ONE_PLACE, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Return ``amount * percent / 100`` unrounded."""
    return amount * percent / HUNDRED
