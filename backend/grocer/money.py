from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a stored or submitted amount to Decimal.

    Floats go through str() so 2.5 becomes Decimal("2.5") rather than its
    binary expansion. Raises InvalidOperation for anything that is not a
    finite number (JSON "Infinity" and "NaN" included).
    """
    if isinstance(value, bool):
        raise InvalidOperation(f"not an amount: {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise InvalidOperation("empty amount")
        result = Decimal(text)
    if not result.is_finite():
        raise InvalidOperation(f"not a finite amount: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    """Display rounding only. Stored totals keep full precision."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal, symbol: str = "$") -> str:
    return f"{symbol}{round_money(value):,.2f}"


def decimal_text(value: Decimal) -> str:
    """Plain (non-exponent) decimal string for persisted records."""
    return format(value, "f")
