"""Global test fixtures."""

import os

# Set session secret before any test modules import Config
# This must happen at module load time, not in a fixture
os.environ.setdefault("RFD_AUTH__SESSION__SECRET", "test-secret-for-unit-tests-min-32")
os.environ.setdefault("RFD_AUTH__SESSION__COOKIE_SECURE", "false")
os.environ.setdefault("RFD_DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RFD_RETENTION__SWEEP_ENABLED", "false")

import logfire  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine  # noqa: E402

from redflag.config import DatabaseConfig  # noqa: E402
from redflag.infrastructure.persistence.database import (  # noqa: E402
    create_db_engine,
    create_session_factory,
    create_tables,
)

logfire.configure(send_to_logfire=False, console=False)


@pytest_asyncio.fixture
async def sqlite_engine():
    """Per-test in-memory SQLite engine with all tables created."""
    engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine):
    factory = create_session_factory(sqlite_engine)
    async with factory() as session:
        yield session

