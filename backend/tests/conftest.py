"""
Pytest fixtures for the test database, client, and authentication.

Each test gets a fresh in-memory SQLite database (aiosqlite), so tests can
commit freely. The booking cost aggregate is a PostgreSQL function in
production; here it is registered as a SQLite function that reads from
`booking_totals`.
"""

import os

os.environ["REDIS_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"

import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eventhub.main import app
from eventhub.db.base import Base
from eventhub.db.session import get_db
from eventhub.models.event import Event
from eventhub.models.service_booking import EventServiceBooking
from eventhub.services.storage_service import StorageFunctionClient, get_storage_client

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# event id -> value returned by calculate_event_booking_total_cost
booking_totals: dict[uuid.UUID, float] = {}


def _calculate_event_booking_total_cost(p_event_id):
    event_id = uuid.UUID(str(p_event_id))
    if event_id not in booking_totals:
        raise LookupError(f"no total for {event_id}")
    return booking_totals[event_id]


def _on_connect(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    dbapi_connection.create_function(
        "calculate_event_booking_total_cost", 1, _calculate_event_booking_total_cost
    )


@pytest.fixture(autouse=True)
def reset_booking_totals():
    booking_totals.clear()
    yield
    booking_totals.clear()


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    event.listen(engine.sync_engine, "connect", _on_connect)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def make_token(user_id: uuid.UUID, name: str = "Dana Organizer") -> str:
    return jwt.encode(
        {"sub": str(user_id), "name": name, "aud": "authenticated"},
        "test-secret",
        algorithm="HS256",
    )


@pytest.fixture
def organizer_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def auth_headers(organizer_id: uuid.UUID) -> dict:
    return {"Authorization": f"Bearer {make_token(organizer_id)}"}


@pytest.fixture
def other_headers(other_user_id: uuid.UUID) -> dict:
    return {"Authorization": f"Bearer {make_token(other_user_id, 'Sam Other')}"}


def schedule(offset: timedelta) -> tuple[date, time]:
    """Date and time columns for an event starting `offset` from now (UTC)."""
    moment = datetime.now(timezone.utc) + offset
    return moment.date(), moment.time().replace(microsecond=0)


@pytest_asyncio.fixture
async def make_event(db_session: AsyncSession, organizer_id: uuid.UUID) -> Callable:
    """Factory inserting an event row; published and upcoming unless overridden."""

    async def factory(**overrides) -> Event:
        event_date, event_time = schedule(overrides.pop("starts_in", timedelta(days=7)))
        values = dict(
            title="Rooftop Networking Night",
            description="Drinks and introductions",
            event_date=event_date,
            event_time=event_time,
            location="Pier 9",
            organizer_id=organizer_id,
            organizer_name="Dana Organizer",
            organizer_specification=None,
            capacity=80,
            price=0,
            attractions=["DJ"],
            features=[],
            category="networking",
            status="upcoming",
            is_published=True,
            is_visible_in_join_tab=True,
            is_visible_in_my_events=True,
        )
        values.update(overrides)
        row = Event(**values)
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)
        return row

    return factory


@pytest_asyncio.fixture
async def test_event(make_event) -> Event:
    return await make_event()


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession) -> Callable:
    async def factory(event: Event, user_id: uuid.UUID, **overrides) -> EventServiceBooking:
        values = dict(
            event_id=event.id,
            user_id=user_id,
            provider_id="prov-1",
            provider_name="Sound Co",
            provider_category="audio",
            quantity=1,
            base_price=100.0,
            total_price=100.0,
            booking_status="pending",
        )
        values.update(overrides)
        row = EventServiceBooking(**values)
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)
        return row

    return factory


def storage_client_for(handler: Callable[[httpx.Request], httpx.Response]) -> StorageFunctionClient:
    return StorageFunctionClient(
        base_url="http://functions.test/functions/v1",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def use_storage():
    """Route the upload endpoint to a mocked storage function."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> StorageFunctionClient:
        storage = storage_client_for(handler)
        app.dependency_overrides[get_storage_client] = lambda: storage
        return storage

    return install


@pytest.fixture
def storage_for() -> Callable[[Callable[[httpx.Request], httpx.Response]], StorageFunctionClient]:
    return storage_client_for


@pytest.fixture
def procedure_totals() -> dict:
    """Values the stand-in calculate_event_booking_total_cost returns, by event id."""
    return booking_totals
