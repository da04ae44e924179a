from enum import Enum


class StorefrontErrorCode(str, Enum):
    """
    Machine-readable failure codes carried by Stock Ledger and Order Store results.
    """
    # Inventory
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    INVALID_QUANTITY = "INVALID_QUANTITY"

    # Orders
    EMPTY_ORDER = "EMPTY_ORDER"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # Transport / persistence
    DATABASE_ERROR = "DATABASE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
