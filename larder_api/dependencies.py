"""
FastAPI Dependencies.

Builds the service graph once per application and hands services to routes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException, Request, status

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from larder.application.handlers import register_order_handlers
from larder.application.interfaces import INotificationService, IPaymentGateway
from larder.application.services import CouponService, OrderService, PaymentService
from larder.infrastructure.adapters.notifications import (
    HttpNotificationService,
    MockNotificationService,
)
from larder.infrastructure.adapters.payments import (
    MockPaymentGateway,
    StripePaymentGateway,
)
from larder.infrastructure.database import Database
from larder.infrastructure.event_bus import InMemoryEventBus
from larder.settings import AppSettings

logger = logging.getLogger(__name__)

ADMIN_ROLE = "ADMIN"


# =============================================================================
# SERVICE GRAPH
# =============================================================================

@dataclass
class Services:
    coupons: CouponService
    orders: OrderService
    payments: PaymentService
    event_bus: InMemoryEventBus
    gateway: IPaymentGateway
    notifier: INotificationService


def build_payment_gateway(settings: AppSettings) -> IPaymentGateway:
    if settings.stripe.enabled:
        logger.info("Using StripePaymentGateway")
        return StripePaymentGateway(settings.stripe)

    logger.warning("Stripe disabled, using MockPaymentGateway")
    return MockPaymentGateway(webhook_secret=settings.stripe.webhook_secret)


def build_notification_service(settings: AppSettings) -> INotificationService:
    if settings.notifications.enabled and settings.notifications.dispatcher_url:
        return HttpNotificationService(settings.notifications)

    logger.info("Using MockNotificationService (notifications disabled)")
    return MockNotificationService()


def build_services(
    database: Database,
    settings: AppSettings,
    gateway: Optional[IPaymentGateway] = None,
    notifier: Optional[INotificationService] = None,
) -> Services:
    """Wire services, adapters and event handlers around one database."""
    session_factory = database.session_factory
    gateway = gateway or build_payment_gateway(settings)
    notifier = notifier or build_notification_service(settings)
    event_bus = InMemoryEventBus()

    checkout = settings.checkout
    coupons = CouponService(session_factory)
    orders = OrderService(
        session_factory,
        coupon_service=coupons,
        event_bus=event_bus,
        pricing=checkout.pricing_policy(),
        currency=checkout.currency,
        estimated_delivery_days=checkout.estimated_delivery_days,
        order_number_attempts=checkout.order_number_attempts,
    )
    payments = PaymentService(session_factory, gateway=gateway, currency=checkout.currency)

    register_order_handlers(event_bus, session_factory, notifier, coupons)
    logger.info("Application services created")

    return Services(
        coupons=coupons,
        orders=orders,
        payments=payments,
        event_bus=event_bus,
        gateway=gateway,
        notifier=notifier,
    )


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Application services not initialized")
    return services


def get_order_service(services: Services = Depends(get_services)) -> OrderService:
    return services.orders


def get_payment_service(services: Services = Depends(get_services)) -> PaymentService:
    return services.payments


def get_coupon_service(services: Services = Depends(get_services)) -> CouponService:
    return services.coupons


# =============================================================================
# CALLER IDENTITY (set by the upstream auth layer)
# =============================================================================

def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id


def is_admin(x_user_role: Optional[str] = Header(default=None)) -> bool:
    return (x_user_role or "").upper() == ADMIN_ROLE


def require_admin(
    user_id: str = Depends(get_current_user_id),
    admin: bool = Depends(is_admin),
) -> str:
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user_id
