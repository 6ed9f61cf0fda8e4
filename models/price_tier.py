from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base import Base


class PriceTier(Base):
    """
    Price tier for quantity-tiered (bulk discount) pricing.

    Each product owns an ordered table of tiers based on quantity:
    - Example: 1-9 units: 100, 10+ units: 80

    A tier with max_quantity NULL is open-ended. The whole order is priced
    at the unit price of the single tier the quantity falls into.
    """
    __tablename__ = 'price_tiers'

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # Table order as entered by the seller
    min_quantity = Column(Integer, nullable=False)
    max_quantity = Column(Integer, nullable=True)
    unit_price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    product = relationship("Product", back_populates="price_tiers")

    __table_args__ = (
        CheckConstraint('min_quantity > 0', name='check_min_quantity_positive'),
        CheckConstraint('max_quantity IS NULL OR max_quantity >= min_quantity', name='check_max_quantity_range'),
        CheckConstraint('unit_price >= 0', name='check_unit_price_not_negative'),
    )


class PriceTierDTO(BaseModel):
    """DTO for price tier data transfer."""
    id: int | None = None
    product_id: int | None = None
    min_quantity: int = Field(..., ge=1)
    max_quantity: int | None = None  # None = unbounded
    unit_price: float = Field(..., ge=0)


class TierPricingResultDTO(BaseModel):
    """Result of pricing a quantity against a tier table (e.g. "12 × 80.00 = 960.00")."""
    quantity: int
    unit_price: float
    total: float
    tier: PriceTierDTO
    is_fallback: bool = False  # True when no tier matched and the last tier was used
