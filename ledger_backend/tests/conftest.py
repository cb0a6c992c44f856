"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from ledger_backend.app.main import app
from ledger_backend.app.db.session import get_db, Base

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine.sync_engine, "connect", set_sqlite_pragma)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db_session(session_factory):
    """Session for service-level tests and fixture data creation."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Async client for testing, bound to the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


CLIENT_DEFAULTS = {
    "name": "Test Client",
    "date_of_birth": "15/08/1990",
    "address": "221B Baker Street, Kolkata",
    "work_types": ["income-tax"],
}

_phone_counter = iter(range(9000000000, 9999999999))


def make_client_payload(**overrides):
    """Valid client body with a unique phone number."""
    payload = {**CLIENT_DEFAULTS, "phone": str(next(_phone_counter))}
    payload.update(overrides)
    return payload


@pytest.fixture
def client_payload():
    return make_client_payload


@pytest.fixture
def create_client(client):
    """Create a client through the API and return its JSON."""

    async def _create(**overrides):
        response = await client.post("/v1/clients", json=make_client_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_work(client):
    """Create a work through the API and return its JSON."""

    async def _create(client_id, total_price, paid_amount=0, **overrides):
        payload = {
            "client_id": client_id,
            "transaction_date": "10/01/2024",
            "work_types": ["income-tax"],
            "description": "ITR filing",
            "total_price": total_price,
            "paid_amount": paid_amount,
        }
        payload.update(overrides)
        response = await client.post("/v1/works", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
