"""SQLAlchemy repository implementations."""

from .checkout_provider_impl import SqlAlchemyAddressProvider, SqlAlchemyCartProvider
from .coupon_repository_impl import SqlAlchemyCouponRepository
from .order_repository_impl import SqlAlchemyOrderRepository
from .payment_repository_impl import SqlAlchemyPaymentRepository

__all__ = [
    "SqlAlchemyAddressProvider",
    "SqlAlchemyCartProvider",
    "SqlAlchemyCouponRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyPaymentRepository",
]
