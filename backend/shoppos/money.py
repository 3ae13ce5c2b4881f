# Overview: Fixed-point currency helpers. Amounts are stored as integer cents.

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from .errors import ValidationError

# Maximum price: $9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999

_CENT = Decimal("0.01")


def to_cents(value, field: str = "price") -> int:
    """
    Convert a decimal amount ("1.50", 1.5, 2) to integer cents.

    Rejects booleans, scientific notation and more than two decimal places;
    floats go through str() so 0.1 stays 0.10 instead of its binary expansion.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a decimal amount")
    if isinstance(value, str):
        raw = value.strip()
        if not raw or "e" in raw.lower():
            raise ValidationError(f"{field} must be a plain decimal amount")
    elif isinstance(value, (int, float)):
        raw = str(value)
    else:
        raise ValidationError(f"{field} must be a decimal amount")

    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"{field} must be a decimal amount")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a decimal amount")
    if amount != amount.quantize(_CENT):
        raise ValidationError(f"{field} cannot have more than two decimal places")

    return int((amount * 100).to_integral_value())


def format_cents(cents: int | None) -> str | None:
    """1234 -> "12.34"."""
    if cents is None:
        return None
    return str((Decimal(cents) / 100).quantize(_CENT))
