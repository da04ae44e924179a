"""
Composition root.

Builds the database adapters and the services that depend on them. Nothing is
registered globally: callers hold the returned Storefront and pass its parts
where they are needed.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import db
from services.cart import Cart
from services.checkout import CheckoutService
from services.order_lifecycle import OrderLifecycleManager
from services.order_store import DatabaseOrderStore
from services.stock_ledger import DatabaseStockLedger
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class Storefront:
    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]
    stock_ledger: DatabaseStockLedger
    order_store: DatabaseOrderStore
    checkout_service: CheckoutService

    def new_cart(self) -> Cart:
        """Empty cart for a new customer session."""
        return Cart()

    def new_order_manager(self) -> OrderLifecycleManager:
        return OrderLifecycleManager(self.order_store)

    async def close(self) -> None:
        await self.engine.dispose()


def create_storefront(db_url: str | None = None, **engine_kwargs) -> Storefront:
    """
    Wire the storefront.

    Without db_url the module-level engine from db.py (config.DB_URL) is reused.
    Extra keyword arguments are passed to create_async_engine when db_url is given.
    """
    if db_url is None:
        engine, session_maker = db.engine, db.session_maker
    else:
        engine = db.build_engine(db_url, **engine_kwargs)
        session_maker = db.build_session_maker(engine)

    stock_ledger = DatabaseStockLedger(session_maker)
    order_store = DatabaseOrderStore(session_maker)
    return Storefront(
        engine=engine,
        session_maker=session_maker,
        stock_ledger=stock_ledger,
        order_store=order_store,
        checkout_service=CheckoutService(stock_ledger, order_store),
    )


async def init_storefront(db_url: str | None = None, configure_logging: bool = True, **engine_kwargs) -> Storefront:
    """Wire the storefront, create missing tables and (optionally) configure logging."""
    if configure_logging:
        setup_logging()
    storefront = create_storefront(db_url, **engine_kwargs)
    await db.create_db_and_tables(storefront.engine)
    logger.info("Storefront initialized")
    return storefront
