"""Coupon discount arithmetic and evaluation result type."""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from ..enums import DiscountType
from ..value_objects import CENT


ZERO = Decimal("0")


@dataclass(frozen=True)
class CouponEvaluation:
    """
    Outcome of evaluating a coupon against a proposed order amount.

    Business-rule failures are values (is_valid=False + message), not
    exceptions. On failure the discount is zero and final_amount is the
    original order amount.
    """

    is_valid: bool
    discount_amount: Decimal
    final_amount: Decimal
    coupon_id: Optional[str] = None
    is_free_shipping: bool = False
    message: Optional[str] = None

    @classmethod
    def rejected(cls, order_amount: Decimal, message: str) -> "CouponEvaluation":
        return cls(
            is_valid=False,
            discount_amount=ZERO,
            final_amount=Decimal(order_amount),
            message=message,
        )

    @classmethod
    def accepted(
        cls,
        coupon_id: str,
        order_amount: Decimal,
        discount_amount: Decimal,
        is_free_shipping: bool = False,
    ) -> "CouponEvaluation":
        return cls(
            is_valid=True,
            discount_amount=discount_amount,
            final_amount=Decimal(order_amount) - discount_amount,
            coupon_id=coupon_id,
            is_free_shipping=is_free_shipping,
        )


def calculate_discount(
    discount_type: DiscountType,
    value: Decimal,
    order_amount: Decimal,
    max_discount_amount: Optional[Decimal] = None,
) -> Tuple[Decimal, bool]:
    """
    Calculate the discount for an order amount.

    Returns:
        (discount_amount, is_free_shipping); the discount never exceeds the
        order amount.
    """
    discount_type = DiscountType(discount_type)
    order_amount = Decimal(order_amount)
    value = Decimal(value)

    if discount_type is DiscountType.PERCENTAGE:
        discount = (order_amount * value / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
        if max_discount_amount is not None and discount > max_discount_amount:
            discount = Decimal(max_discount_amount)
        return min(discount, order_amount), False

    if discount_type is DiscountType.FIXED_AMOUNT:
        return min(value, order_amount), False

    # FREE_SHIPPING: the delivery waiver is applied by order pricing
    return ZERO, True
