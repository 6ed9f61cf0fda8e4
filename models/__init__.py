"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.price_tier import PriceTier
from models.product import Product
from models.orderItem import OrderItem
from models.order import Order

__all__ = [
    'Base',
    'PriceTier',
    'Product',
    'OrderItem',
    'Order',
]
