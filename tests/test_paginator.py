"""Tests for cursor pagination over the store listing"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from core.asset_store import StoreEntry
from core.errors import InvalidCursor, StoreUnavailable
from core.paginator import AssetPaginator, clamp_limit


class ListOnlyStore:
    """Store double with a fixed enumeration order (deliberately unsorted)."""

    def __init__(self, keys: list[str]):
        self.keys = keys
        self.calls = 0

    async def list(self, prefix: str = "") -> list[StoreEntry]:
        self.calls += 1
        return [StoreEntry(key=k, etag=f"e-{k}") for k in self.keys if k.startswith(prefix)]


def _keys(n: int) -> list[str]:
    # Reverse order so any server-side sort would be visible
    return [f"parties/2025/p/img_{i:03d}.jpg" for i in reversed(range(n))]


class TestClampLimit:
    def test_ceiling(self):
        assert clamp_limit(500) == 200

    def test_floor(self):
        assert clamp_limit(0) == 1
        assert clamp_limit(-5) == 1

    def test_default(self):
        assert clamp_limit(None, default=60) == 60


class TestAssetPaginator:
    @pytest.mark.asyncio
    async def test_three_pages_cover_everything_once(self):
        keys = _keys(130) + ["other/x.jpg"]
        paginator = AssetPaginator(ListOnlyStore(keys))

        first = await paginator.list("parties/2025/p/", limit=60)
        second = await paginator.list("parties/2025/p/", limit=60, cursor=first.next_cursor)
        third = await paginator.list("parties/2025/p/", limit=60, cursor=second.next_cursor)

        seen = [r.key for page in (first, second, third) for r in page.records]
        assert seen == keys[:130]
        assert len(set(seen)) == 130
        assert [len(p.records) for p in (first, second, third)] == [60, 60, 10]
        assert first.has_more and second.has_more
        assert third.has_more is False
        assert third.next_cursor is None
        assert {p.total for p in (first, second, third)} == {130}

    @pytest.mark.asyncio
    async def test_cursor_is_last_key_of_page(self):
        paginator = AssetPaginator(ListOnlyStore(_keys(5)))
        page = await paginator.list("", limit=2)
        assert page.next_cursor == page.records[-1].key

    @pytest.mark.asyncio
    async def test_same_arguments_same_page(self):
        paginator = AssetPaginator(ListOnlyStore(_keys(30)))
        first = await paginator.list("", limit=10)
        again = await paginator.list("", limit=10)
        assert first == again

        resumed = await paginator.list("", limit=10, cursor=first.next_cursor)
        resumed_again = await paginator.list("", limit=10, cursor=first.next_cursor)
        assert resumed == resumed_again

    @pytest.mark.asyncio
    async def test_exact_fit_has_no_more(self):
        paginator = AssetPaginator(ListOnlyStore(_keys(60)))
        page = await paginator.list("", limit=60)
        assert page.has_more is False
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_limit_clamped(self):
        paginator = AssetPaginator(ListOnlyStore(_keys(250)))
        page = await paginator.list("", limit=1000)
        assert len(page.records) == 200
        assert page.total == 250

    @pytest.mark.asyncio
    async def test_records_carry_etag_and_filename(self):
        paginator = AssetPaginator(ListOnlyStore(["a/b/c.jpg"]))
        page = await paginator.list("")
        assert page.records[0].etag == "e-a/b/c.jpg"
        assert page.records[0].filename == "c.jpg"

    @pytest.mark.asyncio
    async def test_empty_prefix_listing(self):
        page = await AssetPaginator(ListOnlyStore([])).list("nothing/")
        assert page.records == []
        assert page.total == 0
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_unknown_cursor(self):
        paginator = AssetPaginator(ListOnlyStore(_keys(3)))
        with pytest.raises(InvalidCursor):
            await paginator.list("", cursor="gone.jpg")

    @pytest.mark.asyncio
    async def test_store_unavailable_propagates_without_retry(self):
        store = AsyncMock()
        store.list.side_effect = StoreUnavailable("down")
        with pytest.raises(StoreUnavailable):
            await AssetPaginator(store).list("p/")
        assert store.list.await_count == 1
