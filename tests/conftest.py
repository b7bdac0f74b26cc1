"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Environment must be in place before config is imported anywhere
import test_config  # noqa: F401

from enums.vehicle_segment import VehicleSegment
from models.product import InstallationOverrideDTO, Product
from models.installation_rule import InstallationRule
from models.shipping_address import ShippingAddressDTO


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

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def add_product(test_session):
    """Factory inserting a committed product; returns its id."""

    async def _add_product(
        name: str = "Alloy Wheel 15in",
        price: float = 1000.0,
        discount_price: float | None = None,
        stock: int = 10,
        category: str = "exterior-accessories",
        sub_category: str | None = "alloy-wheels",
        sub_sub_category: str | None = None,
        installation_override: InstallationOverrideDTO | None = None,
        slug: str | None = None
    ) -> int:
        product = Product(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            price=price,
            discount_price=discount_price,
            stock=stock,
            category=category,
            sub_category=sub_category,
            sub_sub_category=sub_sub_category,
            installation_override=installation_override.model_dump(mode="json")
            if installation_override is not None else None
        )
        test_session.add(product)
        await test_session.commit()
        return product.id

    return _add_product


@pytest_asyncio.fixture
async def add_rule(test_session):
    """Factory inserting a committed category installation rule."""

    async def _add_rule(
        category: str,
        sub_category: str | None,
        sub_sub_category: str | None,
        segment_rates: dict[VehicleSegment, float],
        is_active: bool = True
    ) -> int:
        rule = InstallationRule(
            category=category,
            sub_category=sub_category,
            sub_sub_category=sub_sub_category,
            segment_rates={segment.value: rate for segment, rate in segment_rates.items()},
            is_active=is_active
        )
        test_session.add(rule)
        await test_session.commit()
        return rule.id

    return _add_rule


@pytest.fixture
def delhi_address():
    return ShippingAddressDTO(
        street="12 Connaught Place",
        city="New Delhi",
        state="Delhi",
        zip="110001",
        phone="9876543210"
    )
