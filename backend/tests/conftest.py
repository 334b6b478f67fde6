"""
Contact API — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite database, store,
       API client, failing sessions).
How:   Every test gets its own SQLite file under tmp_path, so tests never
       share state and never need PostgreSQL.

Fixture Hierarchy (all function-scoped):
    ├── db_url: sqlite+aiosqlite URL in a fresh temp directory
    ├── engine: async engine with the schema created
    ├── ticking_clock: deterministic clock, +1 second per call
    ├── store: ContactStore on `engine` using `ticking_clock`
    ├── test_client: HTTPX AsyncClient wired to an app using `store`
    └── failing_session_factory: sessions whose queries raise OperationalError
"""

import itertools
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any contacts_api import so the module-level settings never
# point at a real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./contacts-test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from contacts_api.config import Settings  # noqa: E402
from contacts_api.database import build_engine, build_session_factory, create_schema  # noqa: E402
from contacts_api.main import create_app  # noqa: E402
from contacts_api.services.contact_store import ContactStore  # noqa: E402


CLOCK_START = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'contacts.db'}"


@pytest_asyncio.fixture
async def engine(db_url):
    """Async engine on a fresh SQLite file with all tables created."""
    engine = build_engine(Settings(database_url=db_url, log_level="WARNING"))
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def ticking_clock():
    """
    Clock that advances one second per call.

    Makes created_at strictly increasing, so ordering assertions do not
    depend on wall-clock resolution.
    """
    counter = itertools.count()
    return lambda: CLOCK_START + timedelta(seconds=next(counter))


@pytest_asyncio.fixture
async def store(engine, ticking_clock):
    return ContactStore(build_session_factory(engine), clock=ticking_clock)


@pytest_asyncio.fixture
async def test_client(store):
    """
    HTTPX AsyncClient talking to an app built around `store`.

    Usage:
        async def test_ping(test_client):
            response = await test_client.get("/ping")
            assert response.status_code == 200
    """
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def failing_session_factory():
    """
    Session factory whose sessions fail every query with OperationalError.

    Simulates a database that dropped the connection mid-request.
    """
    error = OperationalError("SELECT 1", {}, Exception("connection reset by peer"))

    session = AsyncMock()
    session.execute = AsyncMock(side_effect=error)
    session.get = AsyncMock(side_effect=error)
    session.flush = AsyncMock(side_effect=error)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()

    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory
