"""Domain value objects."""

from .value_objects import CENT, ExecutionID, Money
from .order_number import OrderNumber

__all__ = [
    "CENT",
    "ExecutionID",
    "Money",
    "OrderNumber",
]
