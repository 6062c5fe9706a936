"""SQLAlchemy implementation of CouponRepository."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
import uuid

from sqlalchemy import distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from larder.domain.entities.coupon import Coupon, CouponUsage, CouponUsageStats
from larder.domain.enums import CouponStatus, DiscountType
from larder.domain.repositories.coupon_repository import CouponRepository

from ..mappers import CouponMapper, CouponUsageMapper
from ..models.coupon_model import CouponModel, CouponUsageModel


class SqlAlchemyCouponRepository(CouponRepository):
    """Concrete implementation of CouponRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_code(self, code: str) -> Optional[Coupon]:
        result = await self._session.execute(
            select(CouponModel).where(CouponModel.code == code.upper())
        )
        model = result.scalar_one_or_none()
        return CouponMapper.to_domain(model) if model else None

    async def find_by_id(self, coupon_id: str) -> Optional[Coupon]:
        model = await self._session.get(CouponModel, coupon_id)
        return CouponMapper.to_domain(model) if model else None

    async def add(self, coupon: Coupon) -> None:
        self._session.add(CouponMapper.to_persistence(coupon))
        await self._session.flush()

    async def update(self, coupon: Coupon) -> None:
        existing = await self._session.get(CouponModel, coupon.id)
        if existing is None:
            raise LookupError(f"Coupon row missing for update: {coupon.id}")
        CouponMapper.update_persistence(coupon, existing)
        await self._session.flush()

    async def search(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[CouponStatus] = None,
        discount_type: Optional[DiscountType] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Coupon], int]:
        conditions = []
        if status is not None:
            conditions.append(CouponModel.status == CouponStatus(status).value)
        if discount_type is not None:
            conditions.append(CouponModel.discount_type == DiscountType(discount_type).value)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(CouponModel.code.ilike(pattern), CouponModel.name.ilike(pattern))
            )

        total = await self._session.scalar(
            select(func.count(CouponModel.id)).where(*conditions)
        )
        result = await self._session.execute(
            select(CouponModel)
            .where(*conditions)
            .order_by(CouponModel.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        coupons = [CouponMapper.to_domain(model) for model in result.scalars().all()]
        return coupons, int(total or 0)

    async def count_user_usage(self, coupon_id: str, user_id: str) -> int:
        count = await self._session.scalar(
            select(func.count(CouponUsageModel.id)).where(
                CouponUsageModel.coupon_id == coupon_id,
                CouponUsageModel.user_id == user_id,
            )
        )
        return int(count or 0)

    async def increment_usage_count(self, coupon_id: str) -> None:
        await self._session.execute(
            update(CouponModel)
            .where(CouponModel.id == coupon_id)
            .values(usage_count=CouponModel.usage_count + 1)
            .execution_options(synchronize_session=False)
        )

    async def add_usage(self, usage: CouponUsage) -> None:
        self._session.add(CouponUsageMapper.to_persistence(usage, usage.id or str(uuid.uuid4())))
        await self._session.flush()

    async def usage_stats(self, coupon_id: str) -> CouponUsageStats:
        row = (
            await self._session.execute(
                select(
                    func.count(CouponUsageModel.id),
                    func.count(distinct(CouponUsageModel.user_id)),
                    func.sum(CouponUsageModel.discount_amount),
                    func.max(CouponUsageModel.created_at),
                ).where(CouponUsageModel.coupon_id == coupon_id)
            )
        ).one()

        total_usage, unique_users, total_discount, last_used = row
        return CouponUsageStats(
            total_usage=int(total_usage or 0),
            unique_users=int(unique_users or 0),
            total_discount_given=Decimal(str(total_discount or 0)),
            last_used=last_used,
        )

    async def expire_elapsed(self, now: datetime) -> int:
        result = await self._session.execute(
            update(CouponModel)
            .where(
                CouponModel.valid_until < now,
                CouponModel.status != CouponStatus.EXPIRED.value,
            )
            .values(status=CouponStatus.EXPIRED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
