"""
Test fixtures for the Carbon Calculator test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite sandbox database per test
  - http_client: httpx AsyncClient routed into the sandbox app (no network)
  - api_client: the real ApiClient, signing requests, over http_client
  - add_card_service / payment_card_service: the façades over api_client
  - context: a UseCaseContext wired to both façades
  - registered_card: a card enrolled through the real registration call
  - seed_transaction: records sandbox transactions so footprint queries have data

Key design decisions:
  - Request signing credentials are set in the environment before any
    carbon_calculator module is imported, since Settings is a singleton.
  - The sandbox's get_db dependency is overridden to use the test engine,
    so sandbox code runs exactly as it does when served by uvicorn.
"""

import os

os.environ.setdefault("CONSUMER_KEY", "test-consumer-key")
os.environ.setdefault("SIGNING_SECRET", "test-signing-secret")
os.environ.setdefault("TEST_DATA_BIN", "545454")
os.environ.setdefault("TEST_DATA_CARD_BASE_CURRENCY", "USD")

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402

from carbon_calculator.client import ApiClient  # noqa: E402
from carbon_calculator.sandbox import models  # noqa: E402,F401
from carbon_calculator.sandbox.database import Base, get_db  # noqa: E402
from carbon_calculator.sandbox.main import app  # noqa: E402
from carbon_calculator.services import build_services  # noqa: E402
from carbon_calculator.usecases import UseCaseContext  # noqa: E402


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def http_client(db_engine):
    """
    Async HTTP client routed into the sandbox with the test database injected.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://sandbox.test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(http_client):
    async with ApiClient(http_client=http_client) as client:
        yield client


@pytest_asyncio.fixture
async def add_card_service(api_client):
    return build_services(api_client)[0]


@pytest_asyncio.fixture
async def payment_card_service(api_client):
    return build_services(api_client)[1]


@pytest_asyncio.fixture
async def context(api_client):
    """One UseCaseContext per test run, passed explicitly to each scenario."""
    return UseCaseContext.from_settings(api_client)


@pytest_asyncio.fixture
async def registered_card(context):
    """A card enrolled through the real registration call."""
    return await context.registrar.register_payment_card(context.new_payment_card())


@pytest_asyncio.fixture
async def seed_transaction(api_client):
    """Record a transaction on an enrolled card through the sandbox seeding endpoint."""

    async def _seed(
        payment_card_id: str,
        transaction_date: str,
        mcc: str,
        amount_cents: int,
        currency_code: str = "USD",
    ) -> dict:
        return await api_client.request(
            "POST",
            f"/sandbox/payment-cards/{payment_card_id}/transactions",
            json_body={
                "transactionDate": transaction_date,
                "mcc": mcc,
                "amountCents": amount_cents,
                "currencyCode": currency_code,
            },
        )

    return _seed
