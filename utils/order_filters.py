"""
Order Filter Utilities

Maps OrderFilterType enum to lists of OrderStatus for database queries.
"""
from enums.order_filter import OrderFilterType
from enums.order_status import OrderStatus


def get_status_filter_for_filter_type(filter_type: OrderFilterType | int | None) -> list[OrderStatus] | None:
    """
    Converts OrderFilterType to list of OrderStatus values for repository queries.

    Args:
        filter_type: OrderFilterType enum value (or None for default)

    Returns:
        List of OrderStatus to filter by, or None for all orders

    Default behavior:
        None → ALL, matching the admin orders page which opens on every order.
    """
    if filter_type is None or filter_type == OrderFilterType.ALL:
        return None  # No filter = all orders

    if filter_type == OrderFilterType.ACTIVE:
        return [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.SHIPPED
        ]

    if filter_type == OrderFilterType.COMPLETED:
        return [OrderStatus.DELIVERED]

    if filter_type == OrderFilterType.CANCELLED:
        return [OrderStatus.CANCELLED]

    # Individual status filters
    individual = {
        OrderFilterType.PENDING: OrderStatus.PENDING,
        OrderFilterType.CONFIRMED: OrderStatus.CONFIRMED,
        OrderFilterType.PREPARING: OrderStatus.PREPARING,
        OrderFilterType.SHIPPED: OrderStatus.SHIPPED,
        OrderFilterType.DELIVERED: OrderStatus.DELIVERED,
    }
    if filter_type in individual:
        return [individual[filter_type]]

    # Unknown filter type - fallback to all orders
    return None


def get_filter_type_for_name(name: str | None) -> OrderFilterType | None:
    """
    Resolve a query-string filter ("active", "pending", ...) to OrderFilterType.

    Returns:
        OrderFilterType, or None when name is empty or unknown
    """
    if not name:
        return None
    try:
        return OrderFilterType[name.strip().upper()]
    except KeyError:
        return None
