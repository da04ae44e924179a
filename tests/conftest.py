"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
from decimal import Decimal

# Must be set before config is imported anywhere
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_MASK_SECRETS", "true")

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from db import build_engine, build_session_maker, create_db_and_tables
from models.product import Product, ProductDTO


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine; StaticPool keeps one connection so every session sees the same data."""
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await create_db_and_tables(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_maker(test_engine):
    return build_session_maker(test_engine)


@pytest_asyncio.fixture
async def seed_products(test_session_maker):
    """
    Insert catalog rows. Usage:

        await seed_products(("p1", "Lamp", "100.00", 5), ("p2", "Chair", "49.90", 0))
    """
    async def _seed(*rows):
        async with test_session_maker() as session:
            for product_id, name, price, stock in rows:
                session.add(Product(id=product_id, name=name, price=Decimal(price), stock=stock))
            await session.commit()

    return _seed


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest.fixture
def make_product():
    def _make(product_id: str = "p1", price: str = "100", name: str | None = None, stock: int = 10) -> ProductDTO:
        return ProductDTO(id=product_id, name=name or f"Product {product_id}", price=Decimal(price), stock=stock)

    return _make
