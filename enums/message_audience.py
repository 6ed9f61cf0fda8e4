from enum import Enum


class MessageAudience(Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    COMMON = "common"
