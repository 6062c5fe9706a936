"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID, uuid4


CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary value with currency.

    CRITICAL: Always use Decimal, never float!
    """
    amount: Decimal
    currency: str = "INR"

    def __post_init__(self):
        # Convert to Decimal if needed
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        # Validate currency code (3 letters)
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def quantize(self) -> 'Money':
        """Round to whole cents (half-up)."""
        return Money(amount=self.amount.quantize(CENT, rounding=ROUND_HALF_UP), currency=self.currency)

    def to_minor_units(self) -> int:
        """
        Convert to the gateway's integer minor-unit representation.

        Rounds to the nearest minor unit, halves away from zero.
        """
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @classmethod
    def from_minor_units(cls, minor: int, currency: str = "INR") -> 'Money':
        """Build Money from an integer minor-unit amount (e.g. paise)."""
        return cls(amount=(Decimal(int(minor)) / 100).quantize(CENT), currency=currency.upper())


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for tracing one unit of work through logs and events."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
