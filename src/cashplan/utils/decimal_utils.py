"""Helpers for Decimal normalization."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")
ZERO = Decimal("0")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> Decimal:
    """Quantize a value to currency scale (cents, half-up)."""
    return coerce_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_rate(value) -> Decimal:
    """Quantize a ratio to four decimal places."""
    return coerce_decimal(value).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


__all__ = ["CENT", "ZERO", "coerce_decimal", "to_money", "to_rate"]
