"""SQLAlchemy ORM models for coupons and the coupon usage ledger."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text

from larder.domain.clock import utcnow

from .base import Base


class CouponModel(Base):
    """SQLAlchemy ORM model for coupons table."""

    __tablename__ = "coupons"

    id = Column(String(36), primary_key=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    discount_type = Column(String(32), nullable=False)
    discount_value = Column(Numeric(12, 2), nullable=False)
    min_order_amount = Column(Numeric(12, 2), nullable=True)
    max_discount_amount = Column(Numeric(12, 2), nullable=True)

    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    per_user_limit = Column(Integer, nullable=True)

    valid_from = Column(DateTime, nullable=False)
    valid_until = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    status = Column(String(16), nullable=False, default="ACTIVE", index=True)

    applicable_categories = Column(JSON, nullable=False, default=list)
    applicable_products = Column(JSON, nullable=False, default=list)
    restricted_user_ids = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<CouponModel(id={self.id}, code={self.code}, status={self.status})>"


class CouponUsageModel(Base):
    """Append-only coupon usage ledger."""

    __tablename__ = "coupon_usages"

    id = Column(String(36), primary_key=True)
    coupon_id = Column(String(36), ForeignKey("coupons.id"), nullable=False)
    user_id = Column(String(36), nullable=False)
    order_id = Column(String(36), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_coupon_usages_coupon_user", "coupon_id", "user_id"),
    )
