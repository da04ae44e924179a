"""
Cart-related exceptions.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class InvalidQuantityException(CartException):
    """Raised when adding a product with a quantity that is not a positive integer."""

    def __init__(self, product_id: str, quantity):
        super().__init__(
            f"Invalid quantity {quantity!r} for product {product_id}: must be a positive integer",
            details={'product_id': product_id, 'quantity': quantity}
        )
        self.product_id = product_id
        self.quantity = quantity
