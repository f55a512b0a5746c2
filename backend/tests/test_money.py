from decimal import Decimal, InvalidOperation

import pytest

from grocer.money import decimal_text, format_money, round_money, to_decimal


@pytest.mark.parametrize(
    "value, expected",
    [
        (2.5, Decimal("2.5")),
        (0.1, Decimal("0.1")),
        (3, Decimal("3")),
        (" 1.20 ", Decimal("1.20")),
        (Decimal("4.99"), Decimal("4.99")),
    ],
)
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected


@pytest.mark.parametrize(
    "value",
    [float("inf"), float("-inf"), float("nan"), Decimal("NaN"), "Infinity", "-inf", "", "abc", True],
)
def test_to_decimal_rejects_non_amounts(value):
    with pytest.raises(InvalidOperation):
        to_decimal(value)


def test_display_rounding_is_half_up():
    assert round_money(Decimal("0.375")) == Decimal("0.38")
    assert format_money(Decimal("1234.5"), "€") == "€1,234.50"
    assert decimal_text(Decimal("1E+1")) == "10"
