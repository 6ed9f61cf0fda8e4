from enum import IntEnum


class OrderFilterType(IntEnum):
    """
    Filter types for admin order management.

    Groups orders by status for easier management.
    Default filter: ALL (the admin orders page opens on every order)
    """
    # Predefined filter groups
    ALL = 1                      # All orders
    ACTIVE = 2                   # PENDING, CONFIRMED, PREPARING, SHIPPED
    COMPLETED = 3                # DELIVERED
    CANCELLED = 4                # CANCELLED

    # Individual status filters
    PENDING = 5
    CONFIRMED = 6
    PREPARING = 7
    SHIPPED = 8
    DELIVERED = 9
