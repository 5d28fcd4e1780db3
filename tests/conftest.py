"""Shared fixtures: tmp-rooted asset store, SQLite in-memory DB, ASGI client"""

from __future__ import annotations

# Must set DATABASE_URL before importing any project modules that trigger
# db/session.py module-level engine creation
import os
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.asset_store import LocalFsAssetStore
from core.cache import TTLCache
from db.models import Base


class RecordingLogger:
    """StructuredLogger double that keeps every (level, message, fields) call."""

    def __init__(self) -> None:
        self.records: list[tuple[int, str, dict]] = []

    def log(self, level: int, message: str, **fields) -> None:
        self.records.append((level, message, fields))

    def at(self, level: int) -> list[tuple[int, str, dict]]:
        return [r for r in self.records if r[0] == level]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def asset_store(tmp_path) -> LocalFsAssetStore:
    return LocalFsAssetStore(root=tmp_path / "assets", chunk_size=4)


@pytest.fixture()
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture()
def store_override(asset_store):
    # Tests may swap this for a spy or failing store before making requests
    return {"store": asset_store}


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, store_override):
    from api.deps import get_asset_store, get_tag_summary_cache
    from api.main import app
    from db.session import get_session_dep

    async def override_session():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    tag_cache: TTLCache = TTLCache(300)

    app.dependency_overrides[get_session_dep] = override_session
    app.dependency_overrides[get_asset_store] = lambda: store_override["store"]
    app.dependency_overrides[get_tag_summary_cache] = lambda: tag_cache

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
