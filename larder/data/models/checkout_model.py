"""
ORM models for tables owned by the surrounding storefront.

Only the columns the settlement core reads are mapped. They live in the same
database so that order creation can clear the cart in its own transaction.
"""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from larder.domain.clock import utcnow

from .base import Base


class AddressModel(Base):
    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=False)
    address_line1 = Column(String(500), nullable=False)
    address_line2 = Column(String(500), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False, default="India")


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), unique=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CartItemModel.id",
    )


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cart_id = Column(String(36), ForeignKey("carts.id"), nullable=False, index=True)
    product_id = Column(String(36), nullable=False)
    category_id = Column(String(36), nullable=True)
    product_name = Column(String(500), nullable=False)
    product_image = Column(String(1000), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    variant_id = Column(String(36), ForeignKey("product_variants.id"), nullable=True)
    variant_name = Column(String(255), nullable=True)
    variant_attributes = Column(JSON, nullable=True)

    cart = relationship("CartModel", back_populates="items")


class ProductVariantModel(Base):
    __tablename__ = "product_variants"

    id = Column(String(36), primary_key=True)
    product_id = Column(String(36), nullable=False, index=True)
    sku = Column(String(100), unique=True, nullable=False)
    name = Column(String(255), nullable=True)
