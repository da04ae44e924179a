"""Protocol definitions for the collaborators the checkout and order services depend on."""

from __future__ import annotations

from typing import Protocol

from enums.order_status import OrderStatus
from models.inventory import BatchDeductionResultDTO, InventoryAvailabilityDTO, InventoryDeductionRequestDTO
from models.order import (
    CreateOrderLineDTO,
    CreateOrderResultDTO,
    OrderListResultDTO,
    UpdateOrderStatusResultDTO,
)


class StockLedger(Protocol):
    """Authoritative per-product stock.

    Implementations must make check_availability followed by deduct_batch safe
    against concurrent callers: a batch that passed the check may still be
    refused by deduct_batch, but stock may never go negative. The checkout
    service relies on this and does no locking of its own.
    """

    async def check_availability(self, requests: list[InventoryDeductionRequestDTO]) -> InventoryAvailabilityDTO:
        """Report whether every request can be served, with one entry per unavailable product."""
        ...

    async def deduct_batch(self, requests: list[InventoryDeductionRequestDTO]) -> BatchDeductionResultDTO:
        """Deduct all requests or none of them."""
        ...


class OrderStore(Protocol):
    """Durable store of placed orders."""

    async def create(
        self,
        customer_name: str,
        customer_phone: str,
        customer_address: str,
        items: list[CreateOrderLineDTO],
    ) -> CreateOrderResultDTO:
        """Create an order, snapshotting current product name and price into its lines."""
        ...

    async def list(self) -> OrderListResultDTO:
        """All orders, most recent first."""
        ...

    async def update_status(self, order_id: str, new_status: OrderStatus) -> UpdateOrderStatusResultDTO:
        """Accept or reject a status transition."""
        ...
