"""
Order pricing rules.

Balance equation (MUST ALWAYS HOLD, decimal-exact):
    total = subtotal - coupon_discount - discount + tax + delivery
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from ..value_objects import CENT


ZERO = Decimal("0")


@dataclass(frozen=True)
class PricingPolicy:
    """Flat checkout pricing parameters."""

    tax_rate: Decimal = Decimal("0.05")
    free_delivery_threshold: Decimal = Decimal("500")
    delivery_charge: Decimal = Decimal("50")


@dataclass(frozen=True)
class OrderTotals:
    """Monetary breakdown of an order, computed once at creation."""

    subtotal: Decimal
    coupon_discount: Decimal
    discount: Decimal
    tax: Decimal
    delivery: Decimal
    total: Decimal

    @property
    def subtotal_after_coupon(self) -> Decimal:
        return self.subtotal - self.coupon_discount

    def is_balanced(self) -> bool:
        """Check the balance equation."""
        return self.total == (
            self.subtotal - self.coupon_discount - self.discount + self.tax + self.delivery
        )

    @classmethod
    def compute(
        cls,
        subtotal: Decimal,
        coupon_discount: Decimal = ZERO,
        free_shipping: bool = False,
        policy: PricingPolicy = PricingPolicy(),
    ) -> "OrderTotals":
        """
        Compute the order breakdown.

        Tax is charged on the subtotal after the coupon discount; delivery is
        waived when that amount reaches the free-delivery threshold or the
        coupon grants free shipping.
        """
        subtotal = Decimal(subtotal)
        coupon_discount = Decimal(coupon_discount)
        discount = ZERO

        after_coupon = subtotal - coupon_discount
        tax = (after_coupon * policy.tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)

        if free_shipping or after_coupon >= policy.free_delivery_threshold:
            delivery = ZERO
        else:
            delivery = policy.delivery_charge

        total = after_coupon - discount + tax + delivery

        return cls(
            subtotal=subtotal,
            coupon_discount=coupon_discount,
            discount=discount,
            tax=tax,
            delivery=delivery,
            total=total,
        )
