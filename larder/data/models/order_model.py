"""SQLAlchemy ORM models for the Order aggregate."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from larder.domain.clock import utcnow

from .base import Base


class OrderModel(Base):
    """SQLAlchemy ORM model for orders table."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    status = Column(String(32), nullable=False, default="PENDING", index=True)
    payment_status = Column(String(32), nullable=False, default="PENDING")
    payment_method = Column(String(16), nullable=False)

    # Financial breakdown
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    delivery_charge = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    coupon_discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")

    coupon_id = Column(String(36), nullable=True)
    coupon_code = Column(String(64), nullable=True)
    address_id = Column(String(36), ForeignKey("addresses.id"), nullable=False)
    special_instructions = Column(Text, nullable=True)

    estimated_delivery_date = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItemModel.id",
    )

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, order_number={self.order_number}, status={self.status})>"


class OrderItemModel(Base):
    """SQLAlchemy ORM model for order_items table."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)

    product_id = Column(String(36), nullable=False)
    product_name = Column(String(500), nullable=False)
    product_image = Column(String(1000), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    variant_id = Column(String(36), nullable=True)
    variant_sku = Column(String(100), nullable=True)
    variant_name = Column(String(255), nullable=True)
    variant_attributes = Column(JSON, nullable=True)

    order = relationship("OrderModel", back_populates="items")
