import logging

from enums.error_code import StorefrontErrorCode
from exceptions import (
    EmptyCartException,
    InventoryCheckFailedException,
    InventoryDeductionException,
    InventoryUnavailableException,
    MissingCustomerInfoException,
    OrderCreationException,
)
from models.cart import CartDTO
from models.inventory import InventoryDeductionRequestDTO
from models.order import CreateOrderLineDTO, CustomerInfoDTO
from repositories.protocols import OrderStore, StockLedger
from services.cart import Cart
from utils.order_number import generate_fallback_order_id

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns a cart into a persisted order.

    Both collaborators are passed in explicitly; the service holds no other state
    and does no locking. Concurrent checkouts for the same product are made safe
    by the stock ledger, not here.
    """

    def __init__(self, stock_ledger: StockLedger, order_store: OrderStore):
        self.stock_ledger = stock_ledger
        self.order_store = order_store

    async def place_order(self, cart: Cart, customer_info: CustomerInfoDTO) -> str:
        """
        Place an order for everything in the cart.

        Flow (strictly sequential, each step only runs if the previous one succeeded):
        1. Validate cart and customer info (no external calls)
        2. Build one deduction request per cart line, in line order
        3. Check availability of the whole batch in one call
        4. Deduct the whole batch in one call
        5. Create the order (product ids and quantities only, the store prices the lines)
        6. Clear the cart and return the order id

        The cart is only cleared in step 6. Any failure before that leaves it untouched.

        Args:
            cart: The customer's cart
            customer_info: Name, phone and address for delivery

        Returns:
            Order id issued by the order store

        Raises:
            EmptyCartException: Cart has no lines
            MissingCustomerInfoException: Name, phone or address is blank
            InventoryCheckFailedException: Availability could not be checked
            InventoryUnavailableException: One or more products unavailable
            InventoryDeductionException: Stock deduction failed, nothing was committed
            OrderCreationException: Stock was deducted but the order was not created
        """
        # 1. Preconditions
        snapshot = cart.snapshot()
        if not snapshot.items:
            raise EmptyCartException()
        missing_fields = customer_info.missing_fields()
        if missing_fields:
            raise MissingCustomerInfoException(missing_fields)

        # 2. Deduction requests
        requests = self._build_requests(snapshot)

        # 3. Availability
        await self._check_availability(requests, snapshot)

        # 4. Deduction
        deduction = await self._deduct(requests)

        # 5. Order creation
        lines = [CreateOrderLineDTO(product_id=request.product_id, quantity=request.quantity)
                 for request in requests]
        try:
            result = await self.order_store.create(
                customer_name=customer_info.name.strip(),
                customer_phone=customer_info.phone.strip(),
                customer_address=customer_info.address.strip(),
                items=lines
            )
        except Exception as e:
            self._log_orphaned_deduction(str(e), deduction.results)
            raise OrderCreationException(str(e), StorefrontErrorCode.UNKNOWN_ERROR, deduction.results) from e

        if not result.success:
            reason = result.error or "order store rejected the order"
            self._log_orphaned_deduction(reason, deduction.results)
            raise OrderCreationException(reason, result.code, deduction.results)

        # 6. Finalize
        cart.clear()

        if result.order_id:
            order_id = result.order_id
        else:
            order_id = generate_fallback_order_id()
            logger.warning(f"Order store returned no order id (order number {result.order_number}), "
                           f"using local reference {order_id}")

        logger.info(f"✅ Order placed: {order_id} ({result.order_number}), "
                    f"{len(requests)} lines, total {result.total_amount}")
        return order_id

    @staticmethod
    def _build_requests(cart: CartDTO) -> list[InventoryDeductionRequestDTO]:
        return [InventoryDeductionRequestDTO(product_id=item.product.id, quantity=item.quantity)
                for item in cart.items]

    async def _check_availability(self, requests: list[InventoryDeductionRequestDTO], cart: CartDTO) -> None:
        try:
            availability = await self.stock_ledger.check_availability(requests)
        except Exception as e:
            logger.error(f"❌ Stock availability check raised: {e}", exc_info=True)
            raise InventoryCheckFailedException(str(e), StorefrontErrorCode.UNKNOWN_ERROR) from e

        if availability.error:
            logger.error(f"❌ Stock availability check failed: {availability.error}")
            raise InventoryCheckFailedException(availability.error, availability.code)

        if not availability.available:
            product_names = {item.product.id: item.product.name for item in cart.items}
            if not availability.unavailable_items:
                # Unavailable without a breakdown: report the whole batch
                raise InventoryCheckFailedException(availability.message or "stock ledger reported the cart as unavailable",
                                                    StorefrontErrorCode.INSUFFICIENT_STOCK)
            raise InventoryUnavailableException(availability.unavailable_items, product_names)

    async def _deduct(self, requests: list[InventoryDeductionRequestDTO]):
        try:
            deduction = await self.stock_ledger.deduct_batch(requests)
        except Exception as e:
            logger.error(f"❌ Stock deduction raised: {e}", exc_info=True)
            raise InventoryDeductionException(str(e), StorefrontErrorCode.UNKNOWN_ERROR) from e

        if not deduction.success:
            reason = deduction.error or "stock ledger refused the deduction"
            logger.warning(f"Stock deduction failed ({deduction.code.value if deduction.code else 'no code'}): {reason}")
            raise InventoryDeductionException(reason, deduction.code, deduction.processed_items)
        return deduction

    @staticmethod
    def _log_orphaned_deduction(reason: str, deducted_items) -> None:
        deducted = ", ".join(f"{item.product_id} -{item.quantity_deducted}" for item in deducted_items) or "unknown"
        logger.critical(
            f"🚨 Stock deducted but order not created: {reason}. "
            f"Deducted: {deducted}. Stock was NOT restored, manual reconciliation required"
        )
