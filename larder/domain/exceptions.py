"""
Domain exceptions.

Error taxonomy for the settlement core. The API layer maps each family to an
HTTP status; services raise them, never HTTPException.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""


class SettlementError(Exception):
    """Base class for all settlement errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationError(SettlementError):
    """Malformed or missing input. No side effects were applied."""


# =============================================================================
# NOT FOUND / OWNERSHIP
# =============================================================================

class NotFoundError(SettlementError):
    """Referenced entity does not exist (or is not visible to the caller)."""


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class PaymentNotFoundError(NotFoundError):
    def __init__(self, reference: str):
        super().__init__(f"Payment not found: {reference}")
        self.reference = reference


class CouponNotFoundError(NotFoundError):
    def __init__(self, coupon_id: str):
        super().__init__(f"Coupon not found: {coupon_id}")
        self.coupon_id = coupon_id


class ForbiddenError(SettlementError):
    """Entity exists but belongs to another user."""


# =============================================================================
# STATE CONFLICTS
# =============================================================================

class StateConflictError(SettlementError):
    """Operation is not allowed in the entity's current state."""


class InvalidStatusTransitionError(StateConflictError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Invalid status transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class OrderCancellationError(StateConflictError):
    """Order cannot be cancelled from its current status."""


class PaymentAlreadyCompletedError(StateConflictError):
    def __init__(self, order_id: str):
        super().__init__("Order payment already completed")
        self.order_id = order_id


class RefundNotAllowedError(StateConflictError):
    """Payment is not in a refundable state."""


class RefundExceedsRemainingError(StateConflictError):
    def __init__(self, requested, remaining):
        super().__init__(
            f"Refund amount {requested} exceeds remaining refundable amount {remaining}"
        )
        self.requested = requested
        self.remaining = remaining


class DuplicateCouponError(StateConflictError):
    def __init__(self, code: str):
        super().__init__(f"Coupon code already exists: {code}")
        self.code = code


# =============================================================================
# EXTERNAL DEPENDENCIES
# =============================================================================

class GatewayError(SettlementError):
    """Payment gateway call failed. Never retried by the core."""


class WebhookSignatureError(GatewayError):
    """Webhook payload failed signature verification."""


class WebhookConfigurationError(GatewayError):
    """Webhook secret is not configured."""


# =============================================================================
# INFRASTRUCTURE
# =============================================================================

class OrderNumberGenerationError(SettlementError):
    def __init__(self, attempts: int):
        super().__init__(
            f"Failed to generate unique order number after {attempts} attempts"
        )
        self.attempts = attempts
