"""Fixed-point currency helpers.

Balances and amounts are stored as ``numeric(10, 2)`` and handled in Python
as :class:`~decimal.Decimal` quantized to cents. Binary floats never take
part in arithmetic; a float coming off the wire is converted through its
text form first.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from classbank.utils.errors import InvalidInputError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# numeric(10, 2) upper bound
MAX_AMOUNT = Decimal("99999999.99")


def quantize(value: Decimal) -> Decimal:
    """Round a decimal to exactly two fractional digits."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _coerce(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidOperation
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidOperation
        return Decimal(text)
    raise InvalidOperation


def parse_amount(value: Any, field: str = "Amount") -> Decimal:
    """Parse a client-supplied amount into a positive cent-precision decimal.

    Raises:
        InvalidInputError: if the value is missing, not a finite number, or
            not strictly positive after rounding to cents.
    """
    try:
        amount = _coerce(value)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(f"{field} must be a number") from exc

    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be a finite number")

    if amount > MAX_AMOUNT:
        raise InvalidInputError(f"{field} must not exceed {MAX_AMOUNT}")

    amount = quantize(amount)
    if amount <= ZERO:
        raise InvalidInputError(f"{field} must be greater than 0")
    return amount


def to_decimal(value: Any) -> Decimal:
    """Normalize a stored numeric value (text or JSON number) to cents."""
    if value is None:
        return ZERO
    try:
        return quantize(_coerce(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(f"Invalid stored amount: {value!r}") from exc


def format_amount(value: Decimal) -> str:
    """Render a decimal as fixed two-digit text, e.g. ``-30.00``."""
    return f"{quantize(value):.2f}"
