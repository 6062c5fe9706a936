"""Application DTOs for Payment operations."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from larder.domain.enums import PaymentStatus


class CreatePaymentIntentRequest(BaseModel):
    """Request DTO for creating a payment intent."""

    order_id: str = Field(..., min_length=1, description="Order to pay for")

    model_config = {"frozen": True}


class ConfirmPaymentRequest(BaseModel):
    """Request DTO for direct payment confirmation."""

    payment_intent_id: str = Field(..., min_length=1, description="Gateway intent ID")

    model_config = {"frozen": True}


class RefundRequest(BaseModel):
    """Request DTO for an admin refund. Omit amount for a full refund."""

    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2, description="Amount to refund")

    model_config = {"frozen": True}


class PaymentIntentDTO(BaseModel):
    """Response DTO handed to the client to complete payment."""

    client_secret: Optional[str] = Field(None, description="Gateway client secret")
    payment_intent_id: str = Field(..., description="Gateway intent ID")
    amount: int = Field(..., ge=0, description="Order total in minor units")
    currency: str = Field(..., description="Currency code")
    status: str = Field(..., description="Gateway intent status")

    model_config = {"frozen": True}


class PaymentDTO(BaseModel):
    """Response DTO for payment details."""

    id: str
    order_id: str
    gateway_intent_id: str
    amount: Decimal
    currency: str
    status: PaymentStatus
    transaction_id: Optional[str] = None
    failure_reason: Optional[str] = None
    refunded_amount: Decimal = Decimal("0")
    remaining_refundable: Decimal = Decimal("0")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}


class WebhookAckDTO(BaseModel):
    received: bool = True
