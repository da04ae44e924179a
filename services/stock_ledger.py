import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import db
from db import get_db_session, session_commit, session_rollback
from enums.error_code import StorefrontErrorCode
from models.inventory import BatchDeductionResultDTO, InventoryAvailabilityDTO, InventoryDeductionRequestDTO
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)


class DatabaseStockLedger:
    """
    Stock ledger backed by the products table.

    Every call runs in its own transaction. deduct_batch commits only when every
    line was deducted and rolls back otherwise, so the batch is all-or-nothing.
    Database errors are reported through the result objects with
    StorefrontErrorCode.DATABASE_ERROR instead of being raised.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession] | None = None):
        self._session_maker = session_maker or db.session_maker

    async def check_availability(self, requests: list[InventoryDeductionRequestDTO]) -> InventoryAvailabilityDTO:
        try:
            async with get_db_session(self._session_maker) as session:
                result = await ProductRepository.check_availability(requests, session)
        except SQLAlchemyError as e:
            logger.error(f"❌ Stock availability check failed: {e}", exc_info=True)
            return InventoryAvailabilityDTO(
                available=False,
                error="Stock availability could not be checked",
                code=StorefrontErrorCode.DATABASE_ERROR
            )

        if not result.available:
            logger.info(
                f"Stock check: unavailable products "
                f"{[(item.product_id, item.code.value) for item in result.unavailable_items]}"
            )
        return result

    async def deduct_batch(self, requests: list[InventoryDeductionRequestDTO]) -> BatchDeductionResultDTO:
        try:
            async with get_db_session(self._session_maker) as session:
                try:
                    result = await ProductRepository.deduct_batch(requests, session)
                    if result.success:
                        await session_commit(session)
                    else:
                        await session_rollback(session)
                except Exception:
                    await session_rollback(session)
                    raise
        except SQLAlchemyError as e:
            logger.error(f"❌ Stock deduction failed, transaction rolled back: {e}", exc_info=True)
            return BatchDeductionResultDTO(
                success=False,
                error="Stock could not be deducted",
                code=StorefrontErrorCode.DATABASE_ERROR
            )

        if result.success:
            for line in result.results:
                logger.info(
                    f"📦 Stock deducted: {line.product_id} {line.previous_stock} -> {line.new_stock} "
                    f"(-{line.quantity_deducted})"
                )
        else:
            logger.warning(
                f"Stock deduction refused ({result.code.value if result.code else 'no code'}): {result.error}. "
                f"Rolled back {len(result.processed_items)} already processed lines"
            )
        return result
