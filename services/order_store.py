import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import db
from db import get_db_session, session_commit, session_rollback
from enums.error_code import StorefrontErrorCode
from enums.order_status import OrderStatus
from exceptions import InvalidOrderStateException, OrderNotFoundException
from models.order import (
    CreateOrderLineDTO,
    CreateOrderRequestDTO,
    CreateOrderResultDTO,
    OrderListResultDTO,
    UpdateOrderStatusResultDTO,
)
from repositories.order import OrderRepository
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


class DatabaseOrderStore:
    """
    Order store backed by the orders / order_items tables.

    Business rejections (unknown product, bad quantity, illegal status transition)
    and database errors are both returned as unsuccessful result objects with an
    error message and a StorefrontErrorCode; nothing is raised to the caller.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession] | None = None):
        self._session_maker = session_maker or db.session_maker

    async def create(
        self,
        customer_name: str,
        customer_phone: str,
        customer_address: str,
        items: list[CreateOrderLineDTO],
    ) -> CreateOrderResultDTO:
        request = CreateOrderRequestDTO(
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_address=customer_address,
            items=items
        )

        if not request.items:
            return CreateOrderResultDTO(success=False, error="Order has no items",
                                        code=StorefrontErrorCode.EMPTY_ORDER)
        invalid = [line.product_id for line in request.items if line.quantity <= 0]
        if invalid:
            return CreateOrderResultDTO(success=False,
                                        error=f"Quantity must be positive for: {', '.join(invalid)}",
                                        code=StorefrontErrorCode.INVALID_QUANTITY)

        attempt = 1
        while True:
            try:
                return await self._create_once(request)
            except IntegrityError as e:
                # Concurrent checkouts can count the same daily sequence; recount in a fresh transaction
                if "order_number" not in str(e.orig) or attempt >= ORDER_NUMBER_ATTEMPTS:
                    logger.error(f"❌ Order creation failed: {e}", exc_info=True)
                    return CreateOrderResultDTO(success=False, error="Order could not be saved",
                                                code=StorefrontErrorCode.DATABASE_ERROR)
                logger.warning(f"Order number already taken, retrying ({attempt}/{ORDER_NUMBER_ATTEMPTS})")
                attempt += 1
            except SQLAlchemyError as e:
                logger.error(f"❌ Order creation failed: {e}", exc_info=True)
                return CreateOrderResultDTO(success=False, error="Order could not be saved",
                                            code=StorefrontErrorCode.DATABASE_ERROR)

    async def _create_once(self, request: CreateOrderRequestDTO) -> CreateOrderResultDTO:
        async with get_db_session(self._session_maker) as session:
            try:
                products = await ProductRepository.get_by_ids([line.product_id for line in request.items], session)
                missing = [line.product_id for line in request.items if line.product_id not in products]
                if missing:
                    return CreateOrderResultDTO(success=False,
                                                error=f"Products not found: {', '.join(missing)}",
                                                code=StorefrontErrorCode.PRODUCT_NOT_FOUND)

                order = await OrderRepository.create(request, products, session)
                await session_commit(session)
            except Exception:
                await session_rollback(session)
                raise

        return CreateOrderResultDTO(
            success=True,
            order_id=order.id,
            order_number=order.order_number,
            total_amount=order.total_amount
        )

    async def list(self) -> OrderListResultDTO:
        try:
            async with get_db_session(self._session_maker) as session:
                orders = await OrderRepository.get_all(session)
        except SQLAlchemyError as e:
            logger.error(f"❌ Loading orders failed: {e}", exc_info=True)
            return OrderListResultDTO(success=False, error="Orders could not be loaded",
                                      code=StorefrontErrorCode.DATABASE_ERROR)
        return OrderListResultDTO(success=True, orders=orders)

    async def update_status(self, order_id: str, new_status: OrderStatus) -> UpdateOrderStatusResultDTO:
        try:
            async with get_db_session(self._session_maker) as session:
                try:
                    order = await OrderRepository.update_status(order_id, OrderStatus(new_status), session)
                    await session_commit(session)
                except Exception:
                    await session_rollback(session)
                    raise
        except OrderNotFoundException as e:
            return UpdateOrderStatusResultDTO(success=False, order_id=order_id, error=str(e),
                                              code=StorefrontErrorCode.ORDER_NOT_FOUND)
        except InvalidOrderStateException as e:
            return UpdateOrderStatusResultDTO(success=False, order_id=order_id, error=str(e),
                                              code=StorefrontErrorCode.INVALID_STATUS_TRANSITION)
        except SQLAlchemyError as e:
            logger.error(f"❌ Status update failed for order {order_id}: {e}", exc_info=True)
            return UpdateOrderStatusResultDTO(success=False, order_id=order_id,
                                              error="Order status could not be saved",
                                              code=StorefrontErrorCode.DATABASE_ERROR)

        return UpdateOrderStatusResultDTO(
            success=True,
            order_id=order.id,
            order_number=order.order_number,
            status=order.status,
            updated_at=order.updated_at
        )
