from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator
import logging

from sqlalchemy import event, Engine, Result, CursorResult
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

import config
from models.base import Base

"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.product import Product
from models.order import Order
from models.orderItem import OrderItem

logger = logging.getLogger(__name__)


def build_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """
    Create an async engine for the given URL (defaults to config.DB_URL).

    Extra keyword arguments are passed to create_async_engine, e.g. poolclass=StaticPool
    for in-memory SQLite databases shared between sessions.
    """
    return create_async_engine(url or config.DB_URL, echo=config.DB_ECHO, **kwargs)


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
session_maker = build_session_maker(engine)


@asynccontextmanager
async def get_db_session(maker: async_sessionmaker[AsyncSession] | None = None) -> AsyncGenerator[AsyncSession, None]:
    session = None
    try:
        async with (maker or session_maker)() as async_session:
            session = async_session
            yield session
    finally:
        if session is not None:
            await session.close()


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    query_result = await session.execute(stmt)
    return query_result


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def session_rollback(session: AsyncSession) -> None:
    await session.rollback()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Only SQLite understands PRAGMA; other backends enforce FKs natively
    if "sqlite" not in type(dbapi_connection).__module__:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _ensure_sqlite_folder(url: str) -> None:
    parsed = make_url(url)
    if not parsed.drivername.startswith("sqlite") or not parsed.database or parsed.database == ":memory:":
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


async def create_db_and_tables(bind: AsyncEngine | None = None) -> None:
    """
    Create missing tables. Existing tables and their data are left untouched.
    """
    bind = bind or engine
    _ensure_sqlite_folder(str(bind.url))
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database schema ready ({len(Base.metadata.tables)} tables)")
