"""Order number value object."""
import re
import secrets
from dataclasses import dataclass
from datetime import datetime


_ORDER_NUMBER_RE = re.compile(r"^ORD-\d{8}-\d{5}$")


@dataclass(frozen=True)
class OrderNumber:
    """
    Human-readable order identifier.

    Format: ORD-YYYYMMDD-NNNNN (date of creation + 5-digit random suffix)
    Examples:
    - ORD-20260113-04821
    - ORD-20261019-99310
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order number cannot be empty")

        if not _ORDER_NUMBER_RE.match(self.value):
            raise ValueError(
                f"Invalid order number format (expected ORD-YYYYMMDD-NNNNN): {self.value}"
            )

    @classmethod
    def generate(cls, now: datetime) -> "OrderNumber":
        """
        Compose a candidate order number for the given day.

        Uniqueness is NOT guaranteed here; callers check it against storage.
        """
        suffix = secrets.randbelow(100000)
        return cls(value=f"ORD-{now:%Y%m%d}-{suffix:05d}")

    def __str__(self) -> str:
        return self.value
