"""
Pytest configuration and fixtures.
"""

import sys
from pathlib import Path
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from internship_tracker.domain.ids import IdGenerator
from internship_tracker.infra.db import Base
from internship_tracker.infra.gateway import SqlSnapshotGateway, JsonFileGateway


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a throwaway SQLite database for testing"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    """Session factory bound to the test database"""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def gateway(session_factory):
    """SQL snapshot gateway on the test database"""
    return SqlSnapshotGateway(session_factory)


@pytest.fixture
def json_gateway(tmp_path):
    return JsonFileGateway(tmp_path / "snapshots")


@pytest.fixture
def id_generator():
    """Id generator with a frozen clock so ids are predictable"""
    return IdGenerator(clock=lambda: 1_700_000_000.0)


class FailingGateway(JsonFileGateway):
    """Gateway whose writes always fail, as a full disk would"""

    def __init__(self, directory):
        super().__init__(directory)
        self.save_calls = 0

    async def save(self, key, records):
        self.save_calls += 1
        return False


@pytest.fixture
def failing_gateway(tmp_path):
    return FailingGateway(tmp_path / "readonly")
