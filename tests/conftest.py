"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys

# Set required environment variables before importing app modules
# These are required for config.py to load properly
os.environ.setdefault('RUNTIME_ENVIRONMENT', 'TEST')
os.environ.setdefault('DB_URL', 'sqlite+aiosqlite:///:memory:')
os.environ.setdefault('LANGUAGE', 'en')
os.environ.setdefault('CURRENCY_SYMBOL', 'SLE')
os.environ.setdefault('LOG_MASK_SECRETS', 'true')
os.environ.setdefault('CORS_ALLOWED_ORIGINS', '')
os.environ.setdefault('SECURITY_HEADERS_ENABLED', 'false')

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from models.price_tier import PriceTierDTO
from models.product import ProductDTO


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture
async def test_session(test_session_maker):
    """Create test database session."""
    async with test_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Domain Fixtures
# ============================================================================

@pytest.fixture
def bulk_tiers():
    """1-9 units at 100, 10+ units at 80."""
    return [
        PriceTierDTO(min_quantity=1, max_quantity=9, unit_price=100.0),
        PriceTierDTO(min_quantity=10, max_quantity=None, unit_price=80.0),
    ]


@pytest.fixture
def make_product(bulk_tiers):
    """Factory for in-memory ProductDTOs (not persisted)."""
    def _make(product_id: int = 1, stock: int = 50, name: str = "Rice 25kg", tiers=None, **kwargs):
        return ProductDTO(
            id=product_id,
            seller_id=kwargs.pop('seller_id', 7),
            name=name,
            stock=stock,
            is_active=kwargs.pop('is_active', True),
            price_tiers=tiers if tiers is not None else bulk_tiers,
            **kwargs
        )
    return _make


@pytest_asyncio.fixture
async def create_product(test_session, bulk_tiers):
    """Factory that persists a product with its tier table."""
    from repositories.product import ProductRepository

    async def _create(stock: int = 50, name: str = "Rice 25kg", tiers=None, seller_id: int = 7,
                      is_active: bool = True) -> ProductDTO:
        product = await ProductRepository.create(
            ProductDTO(
                seller_id=seller_id,
                name=name,
                description="",
                category="food",
                stock=stock,
                is_active=is_active,
                price_tiers=tiers if tiers is not None else bulk_tiers,
            ),
            test_session
        )
        await test_session.commit()
        return product
    return _create
