from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, CheckConstraint, Index
from sqlalchemy.orm import relationship

from models.base import Base
from models.price_tier import PriceTierDTO


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True, autoincrement=True)
    seller_id = Column(Integer, nullable=False)  # Reference to the seller account (owned by the auth service)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String, nullable=False, default="")
    images = Column(JSON, nullable=False, default=list)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Tiers are always needed together with the product, load them eagerly
    price_tiers = relationship(
        "PriceTier",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="PriceTier.position",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint('stock >= 0', name='check_product_stock_not_negative'),
        Index('ix_products_seller_id', 'seller_id'),
    )


class ProductDTO(BaseModel):
    id: int | None = None
    seller_id: int | None = None
    name: str | None = None
    description: str | None = None
    category: str | None = None
    images: list[str] = []
    stock: int = 0
    is_active: bool = True
    price_tiers: list[PriceTierDTO] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductCreateDTO(BaseModel):
    """Seller input for a new product."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    category: str = Field("", max_length=100)
    images: list[str] = []
    stock: int = Field(..., ge=0)
    price_tiers: list[PriceTierDTO] = Field(..., min_length=1)
    is_active: bool = True


class ProductUpdateDTO(BaseModel):
    """Partial product update; unset or null fields are left untouched."""
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=100)
    images: list[str] | None = None
    stock: int | None = Field(None, ge=0)
    price_tiers: list[PriceTierDTO] | None = None
    is_active: bool | None = None
