"""
Coupon aggregate and usage ledger entry.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from ..enums import CouponStatus, DiscountType
from ..rules import calculate_discount


@dataclass
class Coupon:
    """Promotional rule set identified by a unique uppercase code."""

    id: str
    code: str
    name: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    description: Optional[str] = None
    min_order_amount: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    per_user_limit: Optional[int] = None
    is_active: bool = True
    status: CouponStatus = CouponStatus.ACTIVE
    applicable_categories: List[str] = field(default_factory=list)
    applicable_products: List[str] = field(default_factory=list)
    restricted_user_ids: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.code = self.code.upper()

    # Each check returns a customer-facing rejection message, or None.

    def availability_rejection(self, now: datetime) -> Optional[str]:
        """Active flag, lifecycle status, validity window, global usage limit."""
        if not self.is_active or self.status is not CouponStatus.ACTIVE:
            return "This coupon is no longer active"

        if now < self.valid_from or now > self.valid_until:
            return "This coupon has expired or is not yet valid"

        if self.usage_limit is not None and self.usage_count >= self.usage_limit:
            return "This coupon has reached its usage limit"

        return None

    def per_user_rejection(self, user_usage_count: int) -> Optional[str]:
        if self.per_user_limit is not None and user_usage_count >= self.per_user_limit:
            return f"You have already used this coupon {self.per_user_limit} time(s)"
        return None

    def basket_rejection(
        self,
        user_id: str,
        order_amount: Decimal,
        category_ids: Iterable[str],
        product_ids: Iterable[str],
    ) -> Optional[str]:
        """Minimum amount, category/product allow-lists, user deny-list."""
        if self.min_order_amount is not None and Decimal(order_amount) < self.min_order_amount:
            return f"Minimum order amount of ₹{self.min_order_amount} required"

        if self.applicable_categories and not set(category_ids) & set(self.applicable_categories):
            return "This coupon is not applicable to items in your cart"

        if self.applicable_products and not set(product_ids) & set(self.applicable_products):
            return "This coupon is not applicable to items in your cart"

        if user_id in self.restricted_user_ids:
            return "You are not eligible to use this coupon"

        return None

    def discount_for(self, order_amount: Decimal) -> Tuple[Decimal, bool]:
        return calculate_discount(
            self.discount_type,
            self.discount_value,
            order_amount,
            self.max_discount_amount,
        )


@dataclass(frozen=True)
class CouponUsage:
    """Append-only ledger row written once per successful coupon application."""

    coupon_id: str
    user_id: str
    order_id: str
    discount_amount: Decimal
    created_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class CouponUsageStats:
    """Aggregate usage statistics for one coupon."""

    total_usage: int
    unique_users: int
    total_discount_given: Decimal
    last_used: Optional[datetime] = None
