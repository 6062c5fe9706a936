"""Repository interface for coupons and the coupon usage ledger."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from ..entities.coupon import Coupon, CouponUsage, CouponUsageStats
from ..enums import CouponStatus, DiscountType


class CouponRepository(ABC):
    """Abstract repository for Coupon persistence."""

    @abstractmethod
    async def find_by_code(self, code: str) -> Optional[Coupon]:
        """Lookup by code (callers pass the normalized uppercase code)."""
        pass

    @abstractmethod
    async def find_by_id(self, coupon_id: str) -> Optional[Coupon]:
        pass

    @abstractmethod
    async def add(self, coupon: Coupon) -> None:
        pass

    @abstractmethod
    async def update(self, coupon: Coupon) -> None:
        pass

    @abstractmethod
    async def search(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[CouponStatus] = None,
        discount_type: Optional[DiscountType] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Coupon], int]:
        pass

    @abstractmethod
    async def count_user_usage(self, coupon_id: str, user_id: str) -> int:
        pass

    @abstractmethod
    async def increment_usage_count(self, coupon_id: str) -> None:
        """Atomically increment the global usage counter (SQL-side)."""
        pass

    @abstractmethod
    async def add_usage(self, usage: CouponUsage) -> None:
        """Append a ledger row. Ledger rows are never updated or deleted."""
        pass

    @abstractmethod
    async def usage_stats(self, coupon_id: str) -> CouponUsageStats:
        pass

    @abstractmethod
    async def expire_elapsed(self, now: datetime) -> int:
        """Flip coupons whose validity ended before `now` to EXPIRED.

        Returns:
            Number of coupons expired
        """
        pass
