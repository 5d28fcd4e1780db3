"""Tests for tag writes and the cached tag summary across separate DB sessions"""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from api.routes import tags as tags_route
from api.routes.tags import SUMMARY_CACHE_KEY, add_tag, all_tags, remove_tag
from core.cache import TTLCache
from db.models import Base


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    # File-backed so each session gets its own connection
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tags.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


def _names(summary) -> dict[str, int]:
    return {t.name: t.count for t in summary.tags}


@pytest.mark.asyncio
async def test_summary_read_from_other_session_sees_added_tag(session_factory):
    cache: TTLCache = TTLCache(300)

    async with session_factory() as writer, session_factory() as reader:
        assert _names(await all_tags(session=reader, cache=cache)) == {}

        await add_tag({"key": "parties/2025/a.jpg", "tag": "sunset"}, session=writer, cache=cache)
        # The writer's request has not finished, yet the summary must already count the tag
        summary = await all_tags(session=reader, cache=cache)

    assert _names(summary) == {"sunset": 1}
    assert _names(cache.get(SUMMARY_CACHE_KEY)) == {"sunset": 1}


@pytest.mark.asyncio
async def test_summary_read_from_other_session_sees_removed_tag(session_factory):
    cache: TTLCache = TTLCache(300)

    async with session_factory() as writer:
        await add_tag({"key": "a.jpg", "tag": "blurry"}, session=writer, cache=cache)
        await add_tag({"key": "b.jpg", "tag": "blurry"}, session=writer, cache=cache)

    async with session_factory() as writer, session_factory() as reader:
        assert _names(await all_tags(session=reader, cache=cache)) == {"blurry": 2}

        await remove_tag({"key": "a.jpg", "tag": "blurry"}, session=writer, cache=cache)
        summary = await all_tags(session=reader, cache=cache)

    assert _names(summary) == {"blurry": 1}


@pytest.mark.asyncio
async def test_summary_computed_across_an_invalidation_is_not_cached(session_factory, monkeypatch):
    cache: TTLCache = TTLCache(300)
    real_counts = tags_route.tag_counts

    async def counts_then_concurrent_write(session):
        counts = await real_counts(session)
        # Another request changes tags while this summary is being built
        cache.invalidate(SUMMARY_CACHE_KEY)
        return counts

    monkeypatch.setattr(tags_route, "tag_counts", counts_then_concurrent_write)

    async with session_factory() as reader:
        await all_tags(session=reader, cache=cache)

    assert cache.get(SUMMARY_CACHE_KEY) is None
