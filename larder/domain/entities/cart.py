"""Read-only views of collaborator data consumed at checkout."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CartLine:
    """One cart line as reported by the cart provider."""
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    category_id: Optional[str] = None
    product_image: Optional[str] = None
    variant_id: Optional[str] = None
    variant_name: Optional[str] = None
    variant_attributes: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Cart:
    user_id: str
    items: List[CartLine] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total_amount(self) -> Decimal:
        return sum((line.subtotal for line in self.items), Decimal("0"))

    @property
    def category_ids(self) -> List[str]:
        seen = dict.fromkeys(line.category_id for line in self.items if line.category_id)
        return list(seen)

    @property
    def product_ids(self) -> List[str]:
        return list(dict.fromkeys(line.product_id for line in self.items))


@dataclass(frozen=True)
class Address:
    """Shipping address owned by a user."""
    id: str
    user_id: str
    full_name: str
    phone_number: str
    address_line1: str
    city: str
    state: str
    postal_code: str
    country: str = "India"
    address_line2: Optional[str] = None
