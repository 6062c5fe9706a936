"""Application DTOs (pydantic request/response models)."""

from .coupon_dto import (
    CouponDTO,
    CouponEvaluationDTO,
    CouponListDTO,
    CouponUsageStatsDTO,
    CreateCouponRequest,
    UpdateCouponRequest,
    ValidateCouponRequest,
)
from .order_dto import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderItemDTO,
    OrderListDTO,
    PaginationDTO,
    UpdateOrderStatusRequest,
)
from .payment_dto import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
    PaymentDTO,
    PaymentIntentDTO,
    RefundRequest,
    WebhookAckDTO,
)

__all__ = [
    "CancelOrderRequest",
    "ConfirmPaymentRequest",
    "CouponDTO",
    "CouponEvaluationDTO",
    "CouponListDTO",
    "CouponUsageStatsDTO",
    "CreateCouponRequest",
    "CreateOrderRequest",
    "CreatePaymentIntentRequest",
    "OrderDTO",
    "OrderItemDTO",
    "OrderListDTO",
    "PaginationDTO",
    "PaymentDTO",
    "PaymentIntentDTO",
    "RefundRequest",
    "UpdateCouponRequest",
    "UpdateOrderStatusRequest",
    "ValidateCouponRequest",
    "WebhookAckDTO",
]
