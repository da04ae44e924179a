"""
Exceptions raised by the order repository while changing an order.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order errors."""
    pass


class OrderNotFoundException(OrderException):
    """No order with the given id exists in the order store."""

    def __init__(self, order_id: str):
        super().__init__(f"No order with id {order_id}", details={'order_id': order_id})
        self.order_id = order_id


class InvalidOrderStateException(OrderException):
    """The requested status is not the next step for the order's current status."""

    def __init__(self, order_id: str, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is '{current_state}' and can only move to '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state
