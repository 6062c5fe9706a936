"""Tests for Money and OrderNumber."""

from datetime import datetime
from decimal import Decimal

import pytest

from larder.domain.value_objects import Money, OrderNumber


def test_minor_units_round_half_up():
    assert Money(Decimal("1050.00")).to_minor_units() == 105000
    assert Money(Decimal("10.005")).to_minor_units() == 1001


def test_from_minor_units():
    money = Money.from_minor_units(52500, "inr")

    assert money.amount == Decimal("525.00")
    assert money.currency == "INR"


def test_quantize_rounds_to_cents():
    assert Money(Decimal("10.005")).quantize().amount == Decimal("10.01")


def test_money_rejects_bad_currency():
    with pytest.raises(ValueError):
        Money(Decimal("1"), "RUPEE")


def test_generated_order_number_format():
    number = OrderNumber.generate(datetime(2026, 1, 13, 8, 0))

    assert number.value.startswith("ORD-20260113-")
    assert len(number.value) == len("ORD-20260113-00000")


@pytest.mark.parametrize("value", ["", "ORD-2026011-00001", "ORD-20260113-1", "ord-20260113-00001"])
def test_order_number_rejects_bad_format(value):
    with pytest.raises(ValueError):
        OrderNumber(value)
