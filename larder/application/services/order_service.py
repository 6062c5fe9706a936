"""Application service for Order operations."""

import logging
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from larder.application.dtos.order_dto import (
    CreateOrderRequest,
    OrderDTO,
    OrderItemDTO,
    OrderListDTO,
    PaginationDTO,
)
from larder.application.services.coupon_service import MAX_PAGE_SIZE, CouponService
from larder.data.uow import UnitOfWork, create_uow
from larder.domain.clock import utcnow
from larder.domain.entities.cart import Cart
from larder.domain.entities.order import Order, OrderItem
from larder.domain.enums import OrderStatus
from larder.domain.event_bus import EventBus
from larder.domain.events import (
    CouponAppliedEvent,
    OrderCancelledEvent,
    OrderPlacedEvent,
    OrderStatusChangedEvent,
)
from larder.domain.exceptions import (
    ForbiddenError,
    NotFoundError,
    OrderNotFoundError,
    OrderNumberGenerationError,
    ValidationError,
)
from larder.domain.rules import OrderTotals, PricingPolicy
from larder.domain.value_objects import Money, OrderNumber


logger = logging.getLogger(__name__)

DEFAULT_ORDER_NUMBER_ATTEMPTS = 5


class OrderService:
    """
    Application service for orchestrating order operations.

    Responsibilities:
    - Turn a cart into an order in one transaction
    - Drive the status state machine
    - Publish domain events after commit for best-effort side effects
    - Transform domain entities into DTOs
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        coupon_service: CouponService,
        event_bus: EventBus,
        pricing: PricingPolicy = PricingPolicy(),
        currency: str = "INR",
        estimated_delivery_days: int = 5,
        order_number_attempts: int = DEFAULT_ORDER_NUMBER_ATTEMPTS,
        order_number_factory: Callable = OrderNumber.generate,
        clock: Callable = utcnow,
    ) -> None:
        """Initialize order service.

        Args:
            session_factory: SQLAlchemy async session factory
            coupon_service: Evaluates coupon codes at checkout
            event_bus: Receives events after each committed mutation
            order_number_factory: Builds a candidate OrderNumber from a datetime
        """
        self._session_factory = session_factory
        self._coupons = coupon_service
        self._events = event_bus
        self._pricing = pricing
        self._currency = currency
        self._estimated_delivery_days = estimated_delivery_days
        self._order_number_attempts = order_number_attempts
        self._order_number_factory = order_number_factory
        self._clock = clock

    async def create_order(self, user_id: str, request: CreateOrderRequest) -> OrderDTO:
        """Create an order from the user's cart.

        Cart read, order + item insert and cart clearing share one
        transaction. Confirmation and coupon usage happen afterwards through
        the event bus and never fail the checkout.

        Args:
            user_id: Authenticated customer
            request: CreateOrderRequest DTO

        Returns:
            OrderDTO with created order details

        Raises:
            NotFoundError: Empty cart, or address missing / not owned
            OrderNumberGenerationError: No free order number after the retry bound
        """
        uow = create_uow(self._session_factory)
        async with uow:
            now = self._clock()

            # 1. Cart and address
            cart = await uow.carts.get_cart(user_id)
            if cart.is_empty:
                raise NotFoundError("Cart is empty")

            address = await uow.addresses.find_for_user(request.address_id, user_id)
            if address is None:
                raise NotFoundError("Address not found or does not belong to user")

            # 2. Coupon (a bad coupon never blocks checkout)
            subtotal = cart.total_amount
            evaluation = None
            if request.coupon_code:
                evaluation = await self._coupons.evaluate(
                    request.coupon_code,
                    user_id,
                    subtotal,
                    cart.category_ids,
                    cart.product_ids,
                )
                if not evaluation.is_valid:
                    logger.warning(
                        f"Coupon {request.coupon_code} not applied for user {user_id}: "
                        f"{evaluation.message}"
                    )
                    evaluation = None

            # 3. Totals
            totals = OrderTotals.compute(
                subtotal,
                coupon_discount=evaluation.discount_amount if evaluation else 0,
                free_shipping=evaluation.is_free_shipping if evaluation else False,
                policy=self._pricing,
            )

            # 4. Order number + item snapshots
            order_number = await self._generate_order_number(uow, now)
            items = await self._snapshot_items(uow, cart)

            order = Order.place(
                order_number=order_number,
                user_id=user_id,
                payment_method=request.payment_method,
                address_id=address.id,
                totals=totals,
                items=items,
                now=now,
                currency=self._currency,
                coupon_id=evaluation.coupon_id if evaluation else None,
                coupon_code=request.coupon_code if evaluation else None,
                special_instructions=request.special_instructions,
                estimated_delivery_days=self._estimated_delivery_days,
            )

            execution_id = str(uow.execution_id.value)
            order.record_event(
                OrderPlacedEvent(
                    order_id=order.id,
                    order_number=order.order_number.value,
                    total_amount=totals.total,
                    payment_method=order.payment_method.value,
                    items_count=len(items),
                    user_id=user_id,
                    execution_id=execution_id,
                )
            )
            if evaluation:
                order.record_event(
                    CouponAppliedEvent(
                        order_id=order.id,
                        coupon_id=evaluation.coupon_id,
                        coupon_code=order.coupon_code,
                        discount_amount=evaluation.discount_amount,
                        user_id=user_id,
                        execution_id=execution_id,
                    )
                )

            # 5. Persist + clear cart, atomically
            await uow.orders.add(order)
            await uow.carts.clear_cart(user_id)
            await uow.commit()

        logger.info(
            f"✅ Order created: {order.order_number.value} "
            f"(user={user_id}, total={order.total}, items={len(order.items)})"
        )

        await self._events.publish_all(order.pull_events())
        return self._order_to_dto(order)

    async def get_order(self, user_id: str, order_id: str, is_admin: bool = False) -> OrderDTO:
        """Get order by ID.

        Raises:
            OrderNotFoundError: Unknown order
            ForbiddenError: Order belongs to someone else
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.find_by_id(order_id)

        if order is None:
            raise OrderNotFoundError(order_id)
        if not is_admin and not order.is_owned_by(user_id):
            raise ForbiddenError("You do not have access to this order")

        return self._order_to_dto(order)

    async def list_orders(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 10,
        status: Optional[OrderStatus] = None,
    ) -> OrderListDTO:
        """List the user's orders, newest first."""
        if page < 1 or not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"page must be >= 1 and page_size between 1 and {MAX_PAGE_SIZE}")

        uow = create_uow(self._session_factory)
        async with uow:
            orders, total = await uow.orders.find_for_user(
                user_id, page=page, page_size=page_size, status=status
            )

        return OrderListDTO(
            orders=[self._order_to_dto(order) for order in orders],
            pagination=PaginationDTO.build(page, page_size, total),
        )

    async def update_order_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> OrderDTO:
        """Move an order along the state machine (admin operation).

        Raises:
            OrderNotFoundError: Unknown order
            InvalidStatusTransitionError: Transition not allowed
            ValidationError: Cancelling without a usable reason
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.find_by_id(order_id, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)

            previous = order.transition_to(OrderStatus(new_status), self._clock(), reason=reason)
            self._record_status_event(order, previous, str(uow.execution_id.value))

            await uow.orders.update(order)
            await uow.commit()

        logger.info(
            f"Order {order.order_number.value} status: {previous.value} → {order.status.value}"
        )
        await self._events.publish_all(order.pull_events())
        return self._order_to_dto(order)

    async def cancel_order(self, user_id: str, order_id: str, reason: str) -> OrderDTO:
        """Customer cancellation.

        Raises:
            OrderNotFoundError: Unknown order, or not owned by user_id
            OrderCancellationError: Status is past CONFIRMED
            ValidationError: Reason shorter than 10 characters
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.find_by_id(order_id, for_update=True)
            if order is None or not order.is_owned_by(user_id):
                raise OrderNotFoundError(order_id)

            previous = order.cancel(reason, self._clock())
            self._record_status_event(order, previous, str(uow.execution_id.value))

            await uow.orders.update(order)
            await uow.commit()

        logger.info(f"Order {order.order_number.value} cancelled by user {user_id}")
        await self._events.publish_all(order.pull_events())
        return self._order_to_dto(order)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _generate_order_number(self, uow: UnitOfWork, now) -> OrderNumber:
        """Pick a random order number not yet taken, within the attempt bound."""
        for attempt in range(1, self._order_number_attempts + 1):
            candidate = self._order_number_factory(now)
            if not await uow.orders.order_number_exists(candidate.value):
                return candidate
            logger.warning(
                f"Order number collision on {candidate.value} "
                f"(attempt {attempt}/{self._order_number_attempts})"
            )

        logger.error(f"Order number generation exhausted {self._order_number_attempts} attempts")
        raise OrderNumberGenerationError(self._order_number_attempts)

    async def _snapshot_items(self, uow: UnitOfWork, cart: Cart) -> List[OrderItem]:
        skus = await uow.carts.variant_skus(line.variant_id for line in cart.items)
        return [
            OrderItem(
                product_id=line.product_id,
                product_name=line.product_name,
                product_image=line.product_image,
                quantity=line.quantity,
                unit_price=Money(amount=line.unit_price, currency=self._currency),
                total_price=Money(amount=line.subtotal, currency=self._currency),
                variant_id=line.variant_id,
                variant_sku=skus.get(line.variant_id) if line.variant_id else None,
                variant_name=line.variant_name,
                variant_attributes=line.variant_attributes,
            )
            for line in cart.items
        ]

    @staticmethod
    def _record_status_event(order: Order, previous: OrderStatus, execution_id: str) -> None:
        if order.status is OrderStatus.CANCELLED:
            event = OrderCancelledEvent(
                order_id=order.id,
                order_number=order.order_number.value,
                previous_status=previous.value,
                reason=order.cancellation_reason,
                user_id=order.user_id,
                execution_id=execution_id,
            )
        else:
            event = OrderStatusChangedEvent(
                order_id=order.id,
                order_number=order.order_number.value,
                previous_status=previous.value,
                new_status=order.status.value,
                user_id=order.user_id,
                execution_id=execution_id,
            )
        order.record_event(event)

    def _order_to_dto(self, order: Order) -> OrderDTO:
        """Transform Order domain entity to OrderDTO."""
        items = [
            OrderItemDTO(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_image=item.product_image,
                quantity=item.quantity,
                unit_price=item.unit_price.amount,
                total_price=item.total_price.amount,
                variant_id=item.variant_id,
                variant_sku=item.variant_sku,
                variant_name=item.variant_name,
                variant_attributes=item.variant_attributes,
            )
            for item in order.items
        ]

        totals = order.totals
        return OrderDTO(
            id=order.id,
            order_number=order.order_number.value,
            user_id=order.user_id,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            subtotal=totals.subtotal,
            coupon_discount=totals.coupon_discount,
            discount_amount=totals.discount,
            tax_amount=totals.tax,
            delivery_charge=totals.delivery,
            total_amount=totals.total,
            currency=order.currency,
            coupon_id=order.coupon_id,
            coupon_code=order.coupon_code,
            address_id=order.address_id,
            special_instructions=order.special_instructions,
            items=items,
            estimated_delivery_date=order.estimated_delivery_date,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            cancellation_reason=order.cancellation_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
