"""
Custom exceptions for the marketplace core.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
MarketplaceException (base)
├── CartException
│   ├── EmptyCartException
│   └── InvalidQuantityException
├── PricingException
│   └── PricingConfigurationException
├── ProductException
│   ├── ProductNotFoundException
│   ├── ProductUnavailableException
│   └── ProductOwnershipException
└── OrderException
    ├── OrderNotFoundException
    ├── InsufficientStockException
    ├── InvalidStatusTransitionException
    ├── OrderValidationException
    └── OrderOwnershipException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

The web layer catches MarketplaceException once and renders a localized message:
    try:
        await OrderService.get_order(order_id, session)
    except MarketplaceException as e:
        status_code, payload = handle_service_error(e)
"""

from .base import MarketplaceException
from .cart import CartException, EmptyCartException, InvalidQuantityException
from .pricing import PricingException, PricingConfigurationException
from .product import (
    ProductException,
    ProductNotFoundException,
    ProductUnavailableException,
    ProductOwnershipException
)
from .order import (
    OrderException,
    OrderNotFoundException,
    InsufficientStockException,
    InvalidStatusTransitionException,
    OrderValidationException,
    OrderOwnershipException
)

__all__ = [
    # Base
    'MarketplaceException',

    # Cart
    'CartException',
    'EmptyCartException',
    'InvalidQuantityException',

    # Pricing
    'PricingException',
    'PricingConfigurationException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'ProductUnavailableException',
    'ProductOwnershipException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InsufficientStockException',
    'InvalidStatusTransitionException',
    'OrderValidationException',
    'OrderOwnershipException',
]
