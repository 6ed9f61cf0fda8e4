"""
Pricing-related exceptions.
"""

from .base import MarketplaceException


class PricingException(MarketplaceException):
    """Base exception for pricing errors."""
    pass


class PricingConfigurationException(PricingException):
    """Raised when a tier table cannot price a quantity or is rejected on write."""

    def __init__(self, reason: str, product_id: int | None = None):
        prefix = f"Invalid price tiers for product {product_id}" if product_id is not None else "Invalid price tiers"
        super().__init__(
            f"{prefix}: {reason}",
            details={'product_id': product_id, 'reason': reason}
        )
        self.product_id = product_id
        self.reason = reason
