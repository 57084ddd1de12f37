"""Test configuration and fixtures."""

import logfire
import pytest
import pytest_asyncio

from voting.config import DatabaseSettings, Settings
from voting.persistence.database import create_engine, create_session_factory
from voting.persistence.tables import VoteSchema
from tests.entities import build_schema, metadata

# Keep telemetry local and quiet during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def schema() -> VoteSchema:
    """Vote schema resolved against the test entities."""
    return build_schema()


@pytest_asyncio.fixture
async def sqlite_session(schema):
    """Session on a fresh in-memory SQLite database with all tables created."""
    settings = Settings(
        environment="test",
        database=DatabaseSettings(url="sqlite+aiosqlite://"),
    )
    engine = create_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session

    await engine.dispose()
