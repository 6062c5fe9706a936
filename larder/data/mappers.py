"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from typing import Optional

from larder.domain.entities.cart import Address, Cart, CartLine
from larder.domain.entities.coupon import Coupon, CouponUsage
from larder.domain.entities.order import Order, OrderItem
from larder.domain.entities.payment import Payment
from larder.domain.enums import (
    CouponStatus,
    DiscountType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from larder.domain.rules import OrderTotals
from larder.domain.value_objects import Money, OrderNumber

from .models import (
    AddressModel,
    CartModel,
    CouponModel,
    CouponUsageModel,
    OrderItemModel,
    OrderModel,
    PaymentModel,
)


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _opt_dec(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel, currency: str) -> OrderItem:
        """Convert ORM model to domain entity.

        Args:
            model: OrderItemModel instance
            currency: Currency of the owning order

        Returns:
            OrderItem domain entity
        """
        return OrderItem(
            id=str(model.id) if model.id is not None else None,
            product_id=model.product_id,
            product_name=model.product_name,
            product_image=model.product_image,
            quantity=model.quantity,
            unit_price=Money(amount=_dec(model.unit_price), currency=currency),
            total_price=Money(amount=_dec(model.total_price), currency=currency),
            variant_id=model.variant_id,
            variant_sku=model.variant_sku,
            variant_name=model.variant_name,
            variant_attributes=model.variant_attributes,
        )

    @staticmethod
    def to_persistence(entity: OrderItem, order_id: str) -> OrderItemModel:
        """Convert domain entity to ORM model.

        Args:
            entity: OrderItem domain entity
            order_id: Owning order ID

        Returns:
            OrderItemModel instance
        """
        return OrderItemModel(
            order_id=order_id,
            product_id=entity.product_id,
            product_name=entity.product_name,
            product_image=entity.product_image,
            quantity=entity.quantity,
            unit_price=entity.unit_price.amount,
            total_price=entity.total_price.amount,
            variant_id=entity.variant_id,
            variant_sku=entity.variant_sku,
            variant_name=entity.variant_name,
            variant_attributes=entity.variant_attributes,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        """Convert ORM model to domain aggregate (with nested items).

        Args:
            model: OrderModel instance

        Returns:
            Order domain aggregate
        """
        totals = OrderTotals(
            subtotal=_dec(model.subtotal),
            coupon_discount=_dec(model.coupon_discount),
            discount=_dec(model.discount_amount),
            tax=_dec(model.tax_amount),
            delivery=_dec(model.delivery_charge),
            total=_dec(model.total_amount),
        )

        return Order(
            id=model.id,
            order_number=OrderNumber(value=model.order_number),
            user_id=model.user_id,
            payment_method=PaymentMethod(model.payment_method),
            address_id=model.address_id,
            totals=totals,
            currency=model.currency,
            items=[OrderItemMapper.to_domain(item, model.currency) for item in model.items],
            status=OrderStatus(model.status),
            payment_status=PaymentStatus(model.payment_status),
            coupon_id=model.coupon_id,
            coupon_code=model.coupon_code,
            special_instructions=model.special_instructions,
            created_at=model.created_at,
            updated_at=model.updated_at,
            estimated_delivery_date=model.estimated_delivery_date,
            delivered_at=model.delivered_at,
            cancelled_at=model.cancelled_at,
            cancellation_reason=model.cancellation_reason,
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert domain aggregate to ORM model (with nested items).

        Args:
            entity: Order domain aggregate

        Returns:
            OrderModel instance
        """
        totals = entity.totals
        order_model = OrderModel(
            id=entity.id,
            order_number=entity.order_number.value,
            user_id=entity.user_id,
            status=entity.status.value,
            payment_status=entity.payment_status.value,
            payment_method=entity.payment_method.value,
            subtotal=totals.subtotal,
            tax_amount=totals.tax,
            delivery_charge=totals.delivery,
            discount_amount=totals.discount,
            coupon_discount=totals.coupon_discount,
            total_amount=totals.total,
            currency=entity.currency,
            coupon_id=entity.coupon_id,
            coupon_code=entity.coupon_code,
            address_id=entity.address_id,
            special_instructions=entity.special_instructions,
            estimated_delivery_date=entity.estimated_delivery_date,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

        # Item snapshots are written once and never rebuilt
        order_model.items = [
            OrderItemMapper.to_persistence(item, entity.id) for item in entity.items
        ]

        return order_model

    @staticmethod
    def update_persistence(entity: Order, model: OrderModel) -> OrderModel:
        """Copy the mutable parts of the aggregate onto an existing row.

        Totals and items are fixed at creation and are not touched.

        Args:
            entity: Order domain aggregate
            model: Existing OrderModel instance

        Returns:
            Updated OrderModel instance
        """
        model.status = entity.status.value
        model.payment_status = entity.payment_status.value
        model.delivered_at = entity.delivered_at
        model.cancelled_at = entity.cancelled_at
        model.cancellation_reason = entity.cancellation_reason
        model.updated_at = entity.updated_at
        return model


class PaymentMapper:
    """Static mapper for Payment ↔ PaymentModel transformation."""

    @staticmethod
    def to_domain(model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            order_id=model.order_id,
            gateway_intent_id=model.gateway_intent_id,
            amount=_dec(model.amount),
            currency=model.currency,
            status=PaymentStatus(model.status),
            transaction_id=model.transaction_id,
            failure_reason=model.failure_reason,
            refunded_amount=_dec(model.refunded_amount),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_persistence(entity: Payment) -> PaymentModel:
        return PaymentModel(
            id=entity.id,
            order_id=entity.order_id,
            gateway_intent_id=entity.gateway_intent_id,
            amount=entity.amount,
            currency=entity.currency,
            status=entity.status.value,
            transaction_id=entity.transaction_id,
            failure_reason=entity.failure_reason,
            refunded_amount=entity.refunded_amount,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def update_persistence(entity: Payment, model: PaymentModel) -> PaymentModel:
        model.gateway_intent_id = entity.gateway_intent_id
        model.status = entity.status.value
        model.transaction_id = entity.transaction_id
        model.failure_reason = entity.failure_reason
        model.refunded_amount = entity.refunded_amount
        model.updated_at = entity.updated_at
        return model


class CouponMapper:
    """Static mapper for Coupon ↔ CouponModel transformation."""

    @staticmethod
    def to_domain(model: CouponModel) -> Coupon:
        return Coupon(
            id=model.id,
            code=model.code,
            name=model.name,
            description=model.description,
            discount_type=DiscountType(model.discount_type),
            discount_value=_dec(model.discount_value),
            min_order_amount=_opt_dec(model.min_order_amount),
            max_discount_amount=_opt_dec(model.max_discount_amount),
            usage_limit=model.usage_limit,
            usage_count=model.usage_count or 0,
            per_user_limit=model.per_user_limit,
            valid_from=model.valid_from,
            valid_until=model.valid_until,
            is_active=model.is_active,
            status=CouponStatus(model.status),
            applicable_categories=list(model.applicable_categories or []),
            applicable_products=list(model.applicable_products or []),
            restricted_user_ids=list(model.restricted_user_ids or []),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_persistence(entity: Coupon) -> CouponModel:
        model = CouponModel(id=entity.id, usage_count=entity.usage_count, created_at=entity.created_at)
        return CouponMapper.update_persistence(entity, model)

    @staticmethod
    def update_persistence(entity: Coupon, model: CouponModel) -> CouponModel:
        """Copy editable coupon fields. usage_count is only changed SQL-side."""
        model.code = entity.code
        model.name = entity.name
        model.description = entity.description
        model.discount_type = entity.discount_type.value
        model.discount_value = entity.discount_value
        model.min_order_amount = entity.min_order_amount
        model.max_discount_amount = entity.max_discount_amount
        model.usage_limit = entity.usage_limit
        model.per_user_limit = entity.per_user_limit
        model.valid_from = entity.valid_from
        model.valid_until = entity.valid_until
        model.is_active = entity.is_active
        model.status = entity.status.value
        model.applicable_categories = list(entity.applicable_categories)
        model.applicable_products = list(entity.applicable_products)
        model.restricted_user_ids = list(entity.restricted_user_ids)
        model.updated_at = entity.updated_at
        return model


class CouponUsageMapper:
    @staticmethod
    def to_persistence(entity: CouponUsage, usage_id: str) -> CouponUsageModel:
        return CouponUsageModel(
            id=usage_id,
            coupon_id=entity.coupon_id,
            user_id=entity.user_id,
            order_id=entity.order_id,
            discount_amount=entity.discount_amount,
            created_at=entity.created_at,
        )


class CheckoutMapper:
    """Read-only mapping of storefront rows into checkout views."""

    @staticmethod
    def cart_to_domain(model: CartModel) -> Cart:
        lines = []
        for item in model.items:
            unit_price = _dec(item.unit_price)
            lines.append(
                CartLine(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    subtotal=unit_price * item.quantity,
                    category_id=item.category_id,
                    product_image=item.product_image,
                    variant_id=item.variant_id,
                    variant_name=item.variant_name,
                    variant_attributes=item.variant_attributes,
                )
            )
        return Cart(user_id=model.user_id, items=lines)

    @staticmethod
    def address_to_domain(model: AddressModel) -> Address:
        return Address(
            id=model.id,
            user_id=model.user_id,
            full_name=model.full_name,
            phone_number=model.phone_number,
            address_line1=model.address_line1,
            address_line2=model.address_line2,
            city=model.city,
            state=model.state,
            postal_code=model.postal_code,
            country=model.country,
        )
