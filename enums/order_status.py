from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"          # Placed by buyer, awaiting confirmation
    CONFIRMED = "confirmed"      # Accepted by seller/admin
    PREPARING = "preparing"      # Being packed
    SHIPPED = "shipped"          # Handed to delivery
    DELIVERED = "delivered"      # Received and paid in cash (final)
    CANCELLED = "cancelled"      # Cancelled before delivery (final)
