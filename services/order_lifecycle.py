import logging

from enums.order_status import OrderStatus
from models.order import OrderDTO, StatusUpdateOutcomeDTO
from repositories.protocols import OrderStore
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderLifecycleManager:
    """
    View state for the order management screen.

    Holds the order list (most recent first), a loading flag and the error of the
    last list load. The list is only ever replaced as a whole, so readers see the
    old list or the new one, never a mix.

    Status transitions are accepted or rejected by the order store; this class
    does not enforce the forward-only rule itself.
    """

    def __init__(self, order_store: OrderStore):
        self.order_store = order_store
        self._orders: tuple[OrderDTO, ...] = ()
        self.loading = False
        self.error: str | None = None

    @property
    def orders(self) -> list[OrderDTO]:
        return list(self._orders)

    def get_order(self, order_id: str) -> OrderDTO | None:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    async def load_orders(self) -> None:
        """
        Reload the order list from the store.

        On failure the previous list is kept and the reason is stored in `error`.
        Overlapping calls are not deduplicated: the last one to finish wins.
        """
        self.loading = True
        self.error = None
        try:
            result = await self.order_store.list()
            if result.success:
                self._orders = tuple(result.orders or [])
                logger.debug(f"Loaded {len(self._orders)} orders")
            else:
                self.error = result.error or "Failed to load orders"
                logger.warning(f"Loading orders failed: {self.error}")
        except Exception as e:
            self.error = str(e)
            logger.error(f"❌ Loading orders raised: {e}", exc_info=True)
        finally:
            self.loading = False

    async def update_order_status(self, order_id: str, new_status: OrderStatus) -> StatusUpdateOutcomeDTO:
        """
        Ask the store to move an order to new_status.

        On success only the matching order's status and updated_at are patched,
        without reloading the list. On failure the held list and `error` are left
        as they were and the reason is returned.
        """
        try:
            result = await self.order_store.update_status(order_id, new_status)
        except Exception as e:
            logger.error(f"❌ Status update for order {order_id} raised: {e}", exc_info=True)
            return StatusUpdateOutcomeDTO(success=False, error=str(e))

        if not result.success:
            reason = result.error or "Failed to update order status"
            logger.warning(f"Status update for order {order_id} rejected: {reason}")
            return StatusUpdateOutcomeDTO(success=False, error=reason)

        status = result.status or OrderStatus(new_status)
        patch = {"status": status}
        if result.updated_at is not None:
            patch["updated_at"] = result.updated_at
        self._orders = tuple(
            order.model_copy(update=patch) if order.id == order_id else order
            for order in self._orders
        )
        logger.info(f"Order {order_id} is now {status.value}")
        return StatusUpdateOutcomeDTO(success=True)

    async def advance_order_status(self, order_id: str) -> StatusUpdateOutcomeDTO:
        """Move a held order to the next status in the chain (the "advance" action)."""
        order = self.get_order(order_id)
        if order is None:
            return StatusUpdateOutcomeDTO(success=False, error=f"Order {order_id} is not loaded")

        if OrderStateMachine.is_final_status(order.status):
            return StatusUpdateOutcomeDTO(success=False,
                                          error=f"Order {order.order_number} is already {order.status.value}")
        return await self.update_order_status(order_id, OrderStateMachine.get_next_status(order.status))
