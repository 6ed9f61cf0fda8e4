"""
Order-related exceptions.
"""

from .base import MarketplaceException


class OrderException(MarketplaceException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InsufficientStockException(OrderException):
    """Raised when authoritative stock cannot cover the requested quantity."""

    def __init__(self, product_id: int, requested: int, available: int | None = None):
        if available is None:
            message = f"Insufficient stock for product {product_id}: requested {requested}"
        else:
            message = f"Insufficient stock for product {product_id}: requested {requested}, available {available}"
        super().__init__(
            message,
            details={'product_id': product_id, 'requested': requested, 'available': available}
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidStatusTransitionException(OrderException):
    """Raised when a status is unknown or the lifecycle forbids the transition."""

    def __init__(self, current_status: str | None, requested_status: str, order_id: int | None = None):
        if current_status is None:
            message = f"Unknown order status '{requested_status}'"
        else:
            message = f"Order {order_id} cannot move from '{current_status}' to '{requested_status}'"
        super().__init__(
            message,
            details={'order_id': order_id, 'current_status': current_status, 'requested_status': requested_status}
        )
        self.order_id = order_id
        self.current_status = current_status
        self.requested_status = requested_status


class OrderValidationException(OrderException):
    """
    Raised when several cart lines fail checkout validation at once.

    Carries the individual per-product exceptions so callers can show
    every offending product, not only the first one.
    """

    def __init__(self, errors: list[OrderException | Exception]):
        product_ids = [getattr(error, 'product_id', None) for error in errors]
        super().__init__(
            f"{len(errors)} cart lines failed validation: products {product_ids}",
            details={'product_ids': product_ids}
        )
        self.errors = errors
        self.product_ids = product_ids


class OrderOwnershipException(OrderException):
    """Raised when user attempts to access/modify order they don't own."""

    def __init__(self, order_id: int, user_id: int):
        super().__init__(
            f"User {user_id} does not have permission to access order {order_id}",
            details={'order_id': order_id, 'user_id': user_id}
        )
        self.order_id = order_id
        self.user_id = user_id
