"""
Cart-related exceptions.
"""

from .base import MarketplaceException


class CartException(MarketplaceException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to checkout with empty cart."""

    def __init__(self, user_id: int | None = None):
        super().__init__(
            f"Cart is empty for user {user_id}" if user_id is not None else "Cart is empty",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class InvalidQuantityException(CartException):
    """Raised when a quantity is below 1 or a product has no stock to select from."""

    def __init__(self, product_id: int | None, requested: int, available: int | None = None):
        if available is not None:
            message = f"Invalid quantity {requested} for product {product_id}: {available} available"
        else:
            message = f"Invalid quantity {requested} for product {product_id}"
        super().__init__(
            message,
            details={'product_id': product_id, 'requested': requested, 'available': available}
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available
