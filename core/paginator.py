"""Limit-bounded, cursor-resumable listing over the store's prefix listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.asset_store import AssetStore
from core.config import settings
from core.errors import InvalidCursor
from core.keys import derive_filename

logger = logging.getLogger(__name__)

MAX_LIMIT = 200


@dataclass(frozen=True)
class AssetRecord:
    key: str
    etag: str
    filename: str


@dataclass(frozen=True)
class AssetPage:
    records: list[AssetRecord]
    next_cursor: str | None
    has_more: bool
    total: int


def clamp_limit(limit: int | None, default: int | None = None, ceiling: int = MAX_LIMIT) -> int:
    if limit is None:
        limit = default if default is not None else settings.LIST_DEFAULT_LIMIT
    return max(1, min(limit, ceiling))


class AssetPaginator:
    """Slices the store's full prefix listing in memory.

    The cursor is the last key of the previous page. Store order is kept as-is.
    StoreUnavailable from the store propagates; there is no retry here.
    """

    def __init__(self, store: AssetStore, max_limit: int = MAX_LIMIT) -> None:
        self._store = store
        self._max_limit = min(max_limit, MAX_LIMIT)

    async def list(self, prefix: str = "", limit: int | None = None, cursor: str | None = None) -> AssetPage:
        limit = clamp_limit(limit, ceiling=self._max_limit)
        entries = await self._store.list(prefix)

        offset = 0
        if cursor:
            offset = self._offset_after(entries, cursor)

        page = entries[offset:offset + limit]
        has_more = len(entries) > offset + limit
        records = [AssetRecord(key=e.key, etag=e.etag, filename=derive_filename(e.key)) for e in page]
        next_cursor = records[-1].key if has_more and records else None

        logger.debug(
            "Listed prefix=%r offset=%d returned=%d total=%d", prefix, offset, len(records), len(entries)
        )
        return AssetPage(records=records, next_cursor=next_cursor, has_more=has_more, total=len(entries))

    @staticmethod
    def _offset_after(entries, cursor: str) -> int:
        for i, entry in enumerate(entries):
            if entry.key == cursor:
                return i + 1
        raise InvalidCursor(f"cursor {cursor!r} not in listing")
