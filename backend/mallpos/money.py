from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from .validation import ValidationError, MAX_PRICE_CENTS

"""
Money handling (authoritative)

- All monetary values are stored and summed as integer minor units (cents).
- Decimal input is accepted at the API boundary and converted exactly; no float
  arithmetic is ever applied to stored amounts.
- Output on the wire is a decimal number with two places.
"""

_CENT = Decimal("0.01")
_MAX_AMOUNT = Decimal(MAX_PRICE_CENTS) / 100


def to_cents(value: Any, field: str = "amount") -> int:
    """
    Convert a wire decimal (number or numeric string) to integer cents.

    Raises ValidationError for missing, non-numeric, non-finite values and
    for values with more than two decimal places.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # repr of a float is its shortest round-trip form (0.1 -> "0.1")
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip().replace("$", "").replace("₹", "").replace(",", "")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    # Bound first: quantize() on a very large exponent exceeds the context precision
    if abs(amount) > _MAX_AMOUNT:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")
    if amount != amount.quantize(_CENT):
        raise ValidationError(f"{field} must have at most two decimal places")

    return int(amount.quantize(_CENT) * 100)


def to_positive_cents(value: Any, field: str = "amount") -> int:
    cents = to_cents(value, field)
    if cents <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return cents


def to_non_negative_cents(value: Any, field: str = "amount") -> int:
    cents = to_cents(value, field)
    if cents < 0:
        raise ValidationError(f"{field} must be >= 0")
    return cents


def from_cents(cents: int | None) -> float | None:
    """Wire representation: a JSON number with two decimal places."""
    if cents is None:
        return None
    return float(Decimal(cents) / 100)
