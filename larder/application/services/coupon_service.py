"""Application service for Coupon operations."""

import logging
import uuid
from decimal import Decimal
from typing import Callable, Iterable, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from larder.application.dtos.coupon_dto import (
    CouponDTO,
    CouponListDTO,
    CouponUsageStatsDTO,
    CreateCouponRequest,
    UpdateCouponRequest,
)
from larder.application.dtos.order_dto import PaginationDTO
from larder.data.uow import create_uow
from larder.domain.clock import utcnow
from larder.domain.entities.coupon import Coupon, CouponUsage
from larder.domain.enums import CouponStatus, DiscountType
from larder.domain.exceptions import CouponNotFoundError, DuplicateCouponError, ValidationError
from larder.domain.repositories import CouponRepository
from larder.domain.rules import CouponEvaluation


logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

# Fields an update may clear with an explicit null
NULLABLE_FIELDS = frozenset(
    {"description", "min_order_amount", "max_discount_amount", "usage_limit", "per_user_limit"}
)


class CouponService:
    """
    Coupon evaluation, usage bookkeeping and admin management.

    Evaluation never raises for business failures: every rejection is a
    CouponEvaluation with is_valid=False and a customer-facing message.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Callable = utcnow,
    ) -> None:
        """Initialize coupon service.

        Args:
            session_factory: SQLAlchemy async session factory
            clock: Returns the current naive-UTC datetime
        """
        self._session_factory = session_factory
        self._clock = clock

    # =========================================================================
    # EVALUATION
    # =========================================================================

    async def evaluate(
        self,
        code: str,
        user_id: str,
        order_amount: Decimal,
        category_ids: Iterable[str] = (),
        product_ids: Iterable[str] = (),
    ) -> CouponEvaluation:
        """Evaluate a coupon in its own read-only transaction.

        Checks run in a fixed order and the first failure wins: code exists,
        active, validity window, global limit, per-user limit, minimum
        amount, category allow-list, product allow-list, user deny-list.

        Always runs in its own transaction, never in the caller's.

        Args:
            code: Coupon code as typed by the customer
            user_id: Customer applying the coupon
            order_amount: Basket amount the discount applies to

        Returns:
            CouponEvaluation (never raises for business or data-access failures)
        """
        order_amount = Decimal(order_amount)
        try:
            uow = create_uow(self._session_factory)
            async with uow:
                return await self._evaluate_with(
                    uow.coupons, code, user_id, order_amount, category_ids, product_ids
                )
        except Exception as e:
            logger.error(f"Coupon validation failed for {code}: {e}", exc_info=True)
            return CouponEvaluation.rejected(order_amount, "Failed to validate coupon")

    async def _evaluate_with(
        self,
        coupons: CouponRepository,
        code: str,
        user_id: str,
        order_amount: Decimal,
        category_ids: Iterable[str],
        product_ids: Iterable[str],
    ) -> CouponEvaluation:
        coupon = await coupons.find_by_code(code.strip().upper())
        if coupon is None:
            return CouponEvaluation.rejected(order_amount, "Coupon code not found")

        now = self._clock()
        rejection = coupon.availability_rejection(now)
        if rejection:
            return CouponEvaluation.rejected(order_amount, rejection)

        if coupon.per_user_limit is not None:
            used = await coupons.count_user_usage(coupon.id, user_id)
            rejection = coupon.per_user_rejection(used)
            if rejection:
                return CouponEvaluation.rejected(order_amount, rejection)

        rejection = coupon.basket_rejection(
            user_id, order_amount, list(category_ids), list(product_ids)
        )
        if rejection:
            return CouponEvaluation.rejected(order_amount, rejection)

        discount, free_shipping = coupon.discount_for(order_amount)
        return CouponEvaluation.accepted(coupon.id, order_amount, discount, free_shipping)

    async def record_usage(
        self,
        coupon_id: str,
        user_id: str,
        order_id: str,
        discount_amount: Decimal,
    ) -> None:
        """Increment the global counter and append a ledger row, atomically."""
        uow = create_uow(self._session_factory)
        async with uow:
            await uow.coupons.increment_usage_count(coupon_id)
            await uow.coupons.add_usage(
                CouponUsage(
                    coupon_id=coupon_id,
                    user_id=user_id,
                    order_id=order_id,
                    discount_amount=Decimal(discount_amount),
                    created_at=self._clock(),
                )
            )
            await uow.commit()

        logger.info(f"Coupon usage recorded: coupon={coupon_id} order={order_id}")

    async def count_user_usage(self, coupon_id: str, user_id: str) -> int:
        uow = create_uow(self._session_factory)
        async with uow:
            return await uow.coupons.count_user_usage(coupon_id, user_id)

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    async def create_coupon(self, request: CreateCouponRequest) -> CouponDTO:
        """Create a coupon.

        Raises:
            DuplicateCouponError: Code already exists
        """
        uow = create_uow(self._session_factory)
        async with uow:
            if await uow.coupons.find_by_code(request.code):
                raise DuplicateCouponError(request.code)

            now = self._clock()
            coupon = Coupon(
                id=str(uuid.uuid4()),
                status=CouponStatus.ACTIVE,
                usage_count=0,
                created_at=now,
                updated_at=now,
                **request.model_dump(),
            )
            await uow.coupons.add(coupon)
            await uow.commit()

        logger.info(f"✅ Coupon created: {coupon.code} ({coupon.discount_type.value})")
        return self._coupon_to_dto(coupon)

    async def update_coupon(self, coupon_id: str, request: UpdateCouponRequest) -> CouponDTO:
        """Apply a partial update; only fields present in the request change.

        Raises:
            CouponNotFoundError: Unknown coupon
            DuplicateCouponError: New code belongs to another coupon
            ValidationError: Resulting coupon is inconsistent
        """
        changes = request.model_dump(exclude_unset=True)

        uow = create_uow(self._session_factory)
        async with uow:
            coupon = await uow.coupons.find_by_id(coupon_id)
            if coupon is None:
                raise CouponNotFoundError(coupon_id)

            new_code = changes.get("code")
            if new_code and new_code != coupon.code:
                if await uow.coupons.find_by_code(new_code):
                    raise DuplicateCouponError(new_code)

            for name, value in changes.items():
                if value is None and name not in NULLABLE_FIELDS:
                    continue
                setattr(coupon, name, value)
            coupon.code = coupon.code.upper()

            if coupon.valid_until <= coupon.valid_from:
                raise ValidationError("valid_until must be after valid_from")
            if coupon.discount_type is DiscountType.PERCENTAGE and coupon.discount_value > 100:
                raise ValidationError("Percentage discount cannot exceed 100")

            coupon.updated_at = self._clock()
            await uow.coupons.update(coupon)
            await uow.commit()

        logger.info(f"Coupon updated: {coupon.code} ({', '.join(sorted(changes))})")
        return self._coupon_to_dto(coupon)

    async def deactivate_coupon(self, coupon_id: str) -> CouponDTO:
        """Soft delete: coupons are referenced by orders and never removed."""
        uow = create_uow(self._session_factory)
        async with uow:
            coupon = await uow.coupons.find_by_id(coupon_id)
            if coupon is None:
                raise CouponNotFoundError(coupon_id)

            coupon.is_active = False
            coupon.updated_at = self._clock()
            await uow.coupons.update(coupon)
            await uow.commit()

        logger.info(f"Coupon deactivated: {coupon.code}")
        return self._coupon_to_dto(coupon)

    async def get_coupon(self, coupon_id: str) -> CouponDTO:
        uow = create_uow(self._session_factory)
        async with uow:
            coupon = await uow.coupons.find_by_id(coupon_id)
            if coupon is None:
                raise CouponNotFoundError(coupon_id)
            return self._coupon_to_dto(coupon)

    async def list_coupons(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[CouponStatus] = None,
        discount_type: Optional[DiscountType] = None,
        search: Optional[str] = None,
    ) -> CouponListDTO:
        if page < 1 or not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"page must be >= 1 and page_size between 1 and {MAX_PAGE_SIZE}")

        uow = create_uow(self._session_factory)
        async with uow:
            coupons, total = await uow.coupons.search(
                page=page,
                page_size=page_size,
                status=status,
                discount_type=discount_type,
                search=search.strip() if search else None,
            )

        return CouponListDTO(
            coupons=[self._coupon_to_dto(coupon) for coupon in coupons],
            pagination=PaginationDTO.build(page, page_size, total),
        )

    async def get_usage_stats(self, coupon_id: str) -> CouponUsageStatsDTO:
        uow = create_uow(self._session_factory)
        async with uow:
            coupon = await uow.coupons.find_by_id(coupon_id)
            if coupon is None:
                raise CouponNotFoundError(coupon_id)
            stats = await uow.coupons.usage_stats(coupon_id)

        return CouponUsageStatsDTO(
            coupon_id=coupon.id,
            code=coupon.code,
            total_usage=stats.total_usage,
            unique_users=stats.unique_users,
            total_discount_given=stats.total_discount_given,
            last_used=stats.last_used,
        )

    async def expire_coupons(self) -> int:
        """Flip every coupon whose validity window has ended to EXPIRED.

        Returns:
            Number of coupons expired by this sweep
        """
        uow = create_uow(self._session_factory)
        async with uow:
            expired = await uow.coupons.expire_elapsed(self._clock())
            await uow.commit()

        logger.info(f"Coupon expiry sweep: {expired} coupon(s) expired")
        return expired

    @staticmethod
    def _coupon_to_dto(coupon: Coupon) -> CouponDTO:
        return CouponDTO(
            id=coupon.id,
            code=coupon.code,
            name=coupon.name,
            description=coupon.description,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            min_order_amount=coupon.min_order_amount,
            max_discount_amount=coupon.max_discount_amount,
            usage_limit=coupon.usage_limit,
            usage_count=coupon.usage_count,
            per_user_limit=coupon.per_user_limit,
            valid_from=coupon.valid_from,
            valid_until=coupon.valid_until,
            is_active=coupon.is_active,
            status=coupon.status,
            applicable_categories=list(coupon.applicable_categories),
            applicable_products=list(coupon.applicable_products),
            restricted_user_ids=list(coupon.restricted_user_ids),
            created_at=coupon.created_at,
            updated_at=coupon.updated_at,
        )
