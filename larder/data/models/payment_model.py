"""SQLAlchemy ORM models for payments and the webhook event ledger."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text

from larder.domain.clock import utcnow

from .base import Base


class PaymentModel(Base):
    """SQLAlchemy ORM model for payments table (1:1 with orders)."""

    __tablename__ = "payments"

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey("orders.id"), unique=True, nullable=False)
    gateway_intent_id = Column(String(255), unique=True, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(32), nullable=False, default="PENDING")
    transaction_id = Column(String(255), nullable=True, index=True)
    failure_reason = Column(Text, nullable=True)
    refunded_amount = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<PaymentModel(id={self.id}, intent={self.gateway_intent_id}, status={self.status})>"


class ProcessedWebhookEventModel(Base):
    """
    Ledger of gateway webhook events already applied.

    Append-only; the unique event_id makes re-delivery detectable inside the
    same transaction that applies the event.
    """

    __tablename__ = "processed_webhook_events"

    event_id = Column(String(255), primary_key=True)
    event_type = Column(String(100), nullable=False)
    gateway_intent_id = Column(String(255), nullable=True, index=True)
    processed_at = Column(DateTime, default=utcnow, nullable=False)
