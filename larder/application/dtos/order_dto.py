"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from larder.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from larder.domain.rules import MIN_CANCELLATION_REASON_LENGTH


class OrderItemDTO(BaseModel):
    """DTO for order item snapshot."""

    id: Optional[str] = Field(None, description="Item ID")
    product_id: str = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name at purchase time")
    product_image: Optional[str] = Field(None, description="Product image URL")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    unit_price: Decimal = Field(..., ge=0, description="Unit price")
    total_price: Decimal = Field(..., ge=0, description="Line total")
    variant_id: Optional[str] = Field(None, description="Variant ID")
    variant_sku: Optional[str] = Field(None, description="Variant SKU")
    variant_name: Optional[str] = Field(None, description="Variant name")
    variant_attributes: Optional[Dict[str, Any]] = Field(None, description="Variant attributes")

    model_config = {"frozen": True}


class CreateOrderRequest(BaseModel):
    """Request DTO for creating an order from the caller's cart."""

    address_id: str = Field(..., min_length=1, description="Shipping address ID")
    payment_method: PaymentMethod = Field(..., description="CARD, UPI, COD or WALLET")
    coupon_code: Optional[str] = Field(None, max_length=64, description="Coupon code")
    special_instructions: Optional[str] = Field(None, max_length=500, description="Delivery notes")

    model_config = {"frozen": True}

    @field_validator("coupon_code")
    @classmethod
    def normalize_coupon_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().upper()
        return value or None


class UpdateOrderStatusRequest(BaseModel):
    """Request DTO for an admin status change."""

    status: OrderStatus = Field(..., description="New order status")
    reason: Optional[str] = Field(None, description="Required when cancelling")

    model_config = {"frozen": True}


class CancelOrderRequest(BaseModel):
    """Request DTO for a customer cancellation."""

    cancellation_reason: str = Field(..., description="Why the order is cancelled")

    model_config = {"frozen": True}

    @field_validator("cancellation_reason")
    @classmethod
    def reason_long_enough(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_CANCELLATION_REASON_LENGTH:
            raise ValueError(
                f"Cancellation reason must be at least {MIN_CANCELLATION_REASON_LENGTH} characters"
            )
        return value


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    id: str = Field(..., description="Order ID")
    order_number: str = Field(..., description="ORD-YYYYMMDD-NNNNN")
    user_id: str = Field(..., description="Owner")
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    subtotal: Decimal
    coupon_discount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    delivery_charge: Decimal
    total_amount: Decimal
    currency: str = "INR"
    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None
    address_id: str
    special_instructions: Optional[str] = None
    items: List[OrderItemDTO] = Field(default_factory=list, description="Order items")
    estimated_delivery_date: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}


class PaginationDTO(BaseModel):
    """Pagination metadata for list responses."""

    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @classmethod
    def build(cls, page: int, page_size: int, total_items: int) -> "PaginationDTO":
        return cls(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=(total_items + page_size - 1) // page_size,
        )


class OrderListDTO(BaseModel):
    """DTO for listing orders."""

    orders: List[OrderDTO] = Field(default_factory=list, description="List of orders")
    pagination: PaginationDTO

    model_config = {"frozen": True}
