"""
Product-related exceptions.
"""

from .base import MarketplaceException


class ProductException(MarketplaceException):
    """Base exception for product-related errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when product is not found in database."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ProductUnavailableException(ProductException):
    """Raised when a product was deactivated or deleted between cart-add and checkout."""

    def __init__(self, product_id: int, name: str | None = None):
        label = f"'{name}' ({product_id})" if name else str(product_id)
        super().__init__(
            f"Product {label} is no longer available",
            details={'product_id': product_id, 'name': name}
        )
        self.product_id = product_id
        self.name = name


class ProductOwnershipException(ProductException):
    """Raised when a seller attempts to modify a product they don't own."""

    def __init__(self, product_id: int, user_id: int):
        super().__init__(
            f"User {user_id} does not have permission to modify product {product_id}",
            details={'product_id': product_id, 'user_id': user_id}
        )
        self.product_id = product_id
        self.user_id = user_id
