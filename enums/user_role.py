from enum import Enum


class UserRole(str, Enum):
    """
    Caller role as asserted by the upstream authentication proxy.

    BUYER: Browses products, manages a cart, places orders
    SELLER: Manages own products, advances orders containing them
    ADMIN: Manages all products and orders
    """
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
