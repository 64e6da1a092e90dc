"""Shared test configuration and fixtures.

Each test gets a fresh SQLite database file, created from the models with
the same ``bookings_no_overlap`` guard the application relies on in
production (installed as triggers on SQLite). Sessions come from a real
``async_sessionmaker`` so the assistant tools, which open their own
sessions, see exactly what the fixtures committed.
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from paxbnb.auth.jwt import create_access_token
from paxbnb.database import Base, get_db, get_session_factory
from paxbnb.main import app
from paxbnb.models import Booking, Profile, Property

# ---------------------------------------------------------------------------
# Database: one SQLite file per test
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create an engine on a fresh database file with all tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'paxbnb-test.db'}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        # Readers must not block the tools' own write sessions
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for direct service calls; the test decides when to commit."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: profiles, properties, bookings
# ---------------------------------------------------------------------------


async def _add_profile(session_factory, user_type: str, full_name: str) -> Profile:
    unique = uuid.uuid4().hex[:8]
    async with session_factory() as session:
        profile = Profile(
            id=uuid.uuid4(),
            email=f"{user_type}-{unique}@test.com",
            full_name=full_name,
            user_type=user_type,
        )
        session.add(profile)
        await session.commit()
    return profile


@pytest_asyncio.fixture
async def host(session_factory) -> Profile:
    return await _add_profile(session_factory, "host", "Hana Host")


@pytest_asyncio.fixture
async def guest(session_factory) -> Profile:
    return await _add_profile(session_factory, "guest", "Gina Guest")


@pytest_asyncio.fixture
async def other_guest(session_factory) -> Profile:
    return await _add_profile(session_factory, "guest", "Otto Other")


@pytest_asyncio.fixture
async def make_property(session_factory, host) -> Callable[..., Awaitable[Property]]:
    """Return a helper that stores a property owned by ``host``."""

    async def _make(**overrides) -> Property:
        data = {
            "host_id": host.id,
            "title": "Seaside Villa",
            "description": "Two bedrooms a short walk from the beach.",
            "price_per_night": Decimal("150.00"),
            "max_guests": 4,
            "bedrooms": 2,
            "beds": 2,
            "bathrooms": 1,
            "address": "Jl. Pantai 1",
            "city": "Canggu",
            "country": "Indonesia",
            "location_type": "beach",
        }
        data.update(overrides)
        async with session_factory() as session:
            prop = Property(**data)
            session.add(prop)
            await session.commit()
            await session.refresh(prop)
        return prop

    return _make


@pytest_asyncio.fixture
async def villa(make_property) -> Property:
    return await make_property()


@pytest_asyncio.fixture
async def make_booking(session_factory) -> Callable[..., Awaitable[Booking]]:
    """Return a helper that stores a booking directly, bypassing the rules.

    Useful for past or cancelled stays the service would refuse to create.
    """

    async def _make(
        prop: Property,
        guest_profile: Profile,
        check_in: date,
        check_out: date,
        status: str = "confirmed",
        guest_count: int = 2,
    ) -> Booking:
        async with session_factory() as session:
            booking = Booking(
                property_id=prop.id,
                guest_id=guest_profile.id,
                check_in=check_in,
                check_out=check_out,
                guest_count=guest_count,
                total_price=Decimal(prop.price_per_night) * (check_out - check_in).days,
                status=status,
            )
            session.add(booking)
            await session.commit()
            await session.refresh(booking)
        return booking

    return _make


# ---------------------------------------------------------------------------
# Convenience fixtures: bearer tokens
# ---------------------------------------------------------------------------


def bearer(profile: Profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(profile.id)})}"}


@pytest_asyncio.fixture
async def guest_headers(guest: Profile) -> dict[str, str]:
    return bearer(guest)


@pytest_asyncio.fixture
async def other_guest_headers(other_guest: Profile) -> dict[str, str]:
    return bearer(other_guest)


@pytest_asyncio.fixture
async def host_headers(host: Profile) -> dict[str, str]:
    return bearer(host)
