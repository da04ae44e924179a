"""
Checkout exceptions.

Each class maps to one stage of the checkout sequence so callers can tell
a rejected request apart from an availability problem, a failed stock
deduction, or the one inconsistent case: stock deducted without an order.
"""

from enums.error_code import StorefrontErrorCode
from models.inventory import DeductionItemResultDTO, UnavailableItemDTO
from .base import StorefrontException


class CheckoutException(StorefrontException):
    """Base exception for checkout errors."""
    pass


class CheckoutValidationException(CheckoutException):
    """Raised before any external call when the checkout request is incomplete."""
    pass


class EmptyCartException(CheckoutValidationException):
    """Raised when trying to checkout with an empty cart."""

    def __init__(self):
        super().__init__("Cart is empty, add at least one product before checking out")


class MissingCustomerInfoException(CheckoutValidationException):
    """Raised when a required customer field (name, phone, address) is empty."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            f"Missing required customer information: {', '.join(missing_fields)}",
            details={'missing_fields': missing_fields}
        )
        self.missing_fields = missing_fields


class InventoryUnavailableException(CheckoutException):
    """Raised when the stock ledger reports one or more products as unavailable."""

    def __init__(self, unavailable_items: list[UnavailableItemDTO], product_names: dict[str, str] | None = None):
        product_names = product_names or {}
        parts = []
        for item in unavailable_items:
            label = f"{product_names[item.product_id]} ({item.product_id})" if item.product_id in product_names \
                else item.product_id
            part = f"{label}: {item.reason}"
            if item.requested_quantity is not None and item.current_stock is not None:
                part += f" (requested {item.requested_quantity}, available {item.current_stock})"
            parts.append(part)
        super().__init__(
            "Some products are not available: " + "; ".join(parts),
            details={'product_ids': [item.product_id for item in unavailable_items]}
        )
        self.unavailable_items = unavailable_items


class InventoryCheckFailedException(CheckoutException):
    """Raised when the availability check could not be performed at all."""

    def __init__(self, reason: str, code: StorefrontErrorCode | None = None):
        super().__init__(
            f"Could not verify stock availability: {reason}",
            details={'code': code.value if code else None}
        )
        self.reason = reason
        self.code = code


class InventoryDeductionException(CheckoutException):
    """Raised when the batch stock deduction fails. No order was created and the cart is untouched."""

    def __init__(self, reason: str, code: StorefrontErrorCode | None = None,
                 processed_items: list[DeductionItemResultDTO] | None = None):
        super().__init__(
            f"Could not reserve stock for the order: {reason}",
            details={'code': code.value if code else None}
        )
        self.reason = reason
        self.code = code
        self.processed_items = processed_items or []


class OrderCreationException(CheckoutException):
    """
    Raised when the order store rejects the order after stock was already deducted.

    Stock is NOT restored automatically. deducted_items lists what was taken
    so the shop can reconcile inventory by hand.
    """

    def __init__(self, reason: str, code: StorefrontErrorCode | None = None,
                 deducted_items: list[DeductionItemResultDTO] | None = None):
        deducted_items = deducted_items or []
        super().__init__(
            f"Order could not be created: {reason}. "
            f"Stock for {len(deducted_items)} product(s) was already deducted and has not been restored; "
            f"manual inventory reconciliation is required",
            details={
                'code': code.value if code else None,
                'deducted': {item.product_id: item.quantity_deducted for item in deducted_items},
            }
        )
        self.reason = reason
        self.code = code
        self.deducted_items = deducted_items
