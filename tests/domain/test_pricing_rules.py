"""Tests for order totals and coupon discount arithmetic."""

from decimal import Decimal

import pytest

from larder.domain.enums import DiscountType
from larder.domain.rules import OrderTotals, PricingPolicy, calculate_discount


def test_no_coupon_above_free_delivery_threshold():
    totals = OrderTotals.compute(Decimal("1000"))

    assert totals.tax == Decimal("50.00")
    assert totals.delivery == Decimal("0")
    assert totals.total == Decimal("1050.00")
    assert totals.is_balanced()


def test_capped_percentage_coupon():
    discount, free_shipping = calculate_discount(
        DiscountType.PERCENTAGE, Decimal("10"), Decimal("1000"), Decimal("80")
    )
    totals = OrderTotals.compute(Decimal("1000"), coupon_discount=discount)

    assert discount == Decimal("80")
    assert free_shipping is False
    assert totals.subtotal_after_coupon == Decimal("920")
    assert totals.tax == Decimal("46.00")
    assert totals.delivery == Decimal("0")
    assert totals.total == Decimal("966.00")


def test_delivery_charged_below_threshold():
    totals = OrderTotals.compute(Decimal("400"))

    assert totals.tax == Decimal("20.00")
    assert totals.delivery == Decimal("50")
    assert totals.total == Decimal("470.00")


def test_threshold_applies_after_coupon():
    # 520 - 40 = 480 < 500, so delivery is charged again
    totals = OrderTotals.compute(Decimal("520"), coupon_discount=Decimal("40"))

    assert totals.delivery == Decimal("50")
    assert totals.tax == Decimal("24.00")
    assert totals.total == Decimal("554.00")


def test_free_shipping_waives_delivery():
    totals = OrderTotals.compute(Decimal("100"), free_shipping=True)

    assert totals.delivery == Decimal("0")
    assert totals.total == Decimal("105.00")


def test_tax_rounds_half_up_to_cents():
    totals = OrderTotals.compute(Decimal("10.10"))

    # 10.10 * 0.05 = 0.505
    assert totals.tax == Decimal("0.51")
    assert totals.is_balanced()


def test_custom_policy():
    policy = PricingPolicy(
        tax_rate=Decimal("0.10"),
        free_delivery_threshold=Decimal("1000"),
        delivery_charge=Decimal("75"),
    )
    totals = OrderTotals.compute(Decimal("600"), policy=policy)

    assert totals.tax == Decimal("60.00")
    assert totals.delivery == Decimal("75")
    assert totals.total == Decimal("735.00")


@pytest.mark.parametrize(
    "discount_type, value, amount, cap, expected",
    [
        (DiscountType.PERCENTAGE, "10", "1000", None, "100.00"),
        (DiscountType.PERCENTAGE, "100", "250", None, "250.00"),
        (DiscountType.PERCENTAGE, "15", "333.33", None, "50.00"),
        (DiscountType.FIXED_AMOUNT, "150", "1000", None, "150"),
        (DiscountType.FIXED_AMOUNT, "150", "100", None, "100"),
        (DiscountType.FREE_SHIPPING, "0", "1000", None, "0"),
    ],
)
def test_calculate_discount(discount_type, value, amount, cap, expected):
    discount, _ = calculate_discount(
        discount_type, Decimal(value), Decimal(amount), Decimal(cap) if cap else None
    )
    assert discount == Decimal(expected)


def test_free_shipping_flag():
    discount, free_shipping = calculate_discount(
        DiscountType.FREE_SHIPPING, Decimal("0"), Decimal("300")
    )
    assert discount == Decimal("0")
    assert free_shipping is True
