"""Queries over curation rows shared by the tag, rating and event routes."""

from __future__ import annotations

import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import AssetMetadataRow


def _now_ms() -> int:
    return int(time.time() * 1000)


async def get_row(session: AsyncSession, key: str) -> AssetMetadataRow | None:
    result = await session.execute(select(AssetMetadataRow).where(AssetMetadataRow.key == key))
    return result.scalar_one_or_none()


async def get_or_create_row(session: AsyncSession, key: str) -> AssetMetadataRow:
    row = await get_row(session, key)
    if row is None:
        row = AssetMetadataRow(key=key, tags=[], rating=None, top_pick=False, updated_at_ms=_now_ms())
        session.add(row)
    return row


async def rows_for_keys(session: AsyncSession, keys: list[str]) -> dict[str, AssetMetadataRow]:
    if not keys:
        return {}
    result = await session.execute(select(AssetMetadataRow).where(AssetMetadataRow.key.in_(keys)))
    return {row.key: row for row in result.scalars().all()}


def touch(row: AssetMetadataRow) -> None:
    row.updated_at_ms = _now_ms()


async def tag_counts(session: AsyncSession) -> dict[str, int]:
    result = await session.execute(select(AssetMetadataRow.tags))
    counts: dict[str, int] = {}
    for (tags,) in result.all():
        for tag in tags or []:
            counts[tag] = counts.get(tag, 0) + 1
    return counts
