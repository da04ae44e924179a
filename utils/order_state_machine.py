"""
Order State Machine for validating order status transitions and maintaining consistency.

Orders only move forward, one step at a time:

    pending -> confirmed -> shipping -> delivered

delivered is final. Regressions, skips and same-status updates are rejected.
"""

import logging

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions with validation and audit logging.
    """

    VALID_TRANSITIONS: list[OrderStatusTransition] = [
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            description="Order confirmed by shop"
        ),
        OrderStatusTransition(
            OrderStatus.CONFIRMED,
            OrderStatus.SHIPPING,
            description="Order handed over for delivery"
        ),
        OrderStatusTransition(
            OrderStatus.SHIPPING,
            OrderStatus.DELIVERED,
            description="Order delivered and paid on delivery"
        ),
    ]

    # Forward chain: each status has at most one successor
    _next_status: dict[OrderStatus, OrderStatus] = {
        t.from_status: t.to_status for t in VALID_TRANSITIONS
    }
    _descriptions: dict[tuple[OrderStatus, OrderStatus], str] = {
        (t.from_status, t.to_status): t.description for t in VALID_TRANSITIONS
    }

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Args:
            from_status: Current order status
            to_status: Desired new status

        Returns:
            True if to_status is the immediate successor of from_status
        """
        return cls._next_status.get(OrderStatus(from_status)) == OrderStatus(to_status)

    @classmethod
    def get_next_status(cls, from_status: OrderStatus) -> OrderStatus | None:
        """Next status in the chain, or None for a final status."""
        return cls._next_status.get(OrderStatus(from_status))

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        return cls.get_next_status(status) is None

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        return cls._descriptions.get(
            (OrderStatus(from_status), OrderStatus(to_status)),
            f"Transition from {OrderStatus(from_status).value} to {OrderStatus(to_status).value}"
        )

    @classmethod
    def validate_and_log_transition(cls, order_id: str, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Validate a status transition and write an audit log line.

        Returns:
            True if transition is valid and logged, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(
                f"Invalid status transition for order {order_id}: "
                f"{OrderStatus(from_status).value} -> {OrderStatus(to_status).value}"
            )
            return False

        transition_desc = cls.get_transition_description(from_status, to_status)
        logger.info(
            f"ORDER_STATUS_TRANSITION: Order {order_id} "
            f"{OrderStatus(from_status).value} -> {OrderStatus(to_status).value}: {transition_desc}"
        )
        return True
