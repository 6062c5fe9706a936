from .order_handlers import CouponUsageHandler, OrderNotificationHandler, register_order_handlers

__all__ = ["CouponUsageHandler", "OrderNotificationHandler", "register_order_handlers"]
