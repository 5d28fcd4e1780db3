"""Tag endpoints: per-asset tags, add/remove, and counts across all assets"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_tag_summary_cache
from core.cache import TTLCache
from core.errors import InvalidKeyFormat, MissingKey
from core.keys import validate_key
from core.models import TagCount, TagsResponse, TagSummaryResponse
from core.validation import validate_tag_update
from db.curation import get_or_create_row, get_row, tag_counts, touch
from db.session import get_session_dep

router = APIRouter(prefix="/tags", tags=["tags"])

SUMMARY_CACHE_KEY = "all"


@router.get("", response_model=TagsResponse)
async def get_tags(
    key: str | None = Query(None),
    session: AsyncSession = Depends(get_session_dep),
) -> TagsResponse:
    if not key:
        raise MissingKey()
    if not validate_key(key):
        raise InvalidKeyFormat(key)
    row = await get_row(session, key)
    return TagsResponse(key=key, tags=list(row.tags) if row else [])


@router.post("/add", response_model=TagsResponse)
async def add_tag(
    body: dict,
    session: AsyncSession = Depends(get_session_dep),
    cache: TTLCache = Depends(get_tag_summary_cache),
) -> TagsResponse:
    update = validate_tag_update(body)
    row = await get_or_create_row(session, update.key)
    if update.tag not in row.tags:
        # Reassign so the JSON column change is tracked
        row.tags = [*row.tags, update.tag]
        touch(row)
        # Invalidate only once the change is visible to other sessions
        await session.commit()
        cache.invalidate(SUMMARY_CACHE_KEY)
    return TagsResponse(key=update.key, tags=list(row.tags))


@router.post("/remove", response_model=TagsResponse)
async def remove_tag(
    body: dict,
    session: AsyncSession = Depends(get_session_dep),
    cache: TTLCache = Depends(get_tag_summary_cache),
) -> TagsResponse:
    update = validate_tag_update(body)
    row = await get_row(session, update.key)
    if row is None:
        return TagsResponse(key=update.key, tags=[])
    if update.tag in row.tags:
        row.tags = [t for t in row.tags if t != update.tag]
        touch(row)
        await session.commit()
        cache.invalidate(SUMMARY_CACHE_KEY)
    return TagsResponse(key=update.key, tags=list(row.tags))


@router.get("/all", response_model=TagSummaryResponse)
async def all_tags(
    session: AsyncSession = Depends(get_session_dep),
    cache: TTLCache = Depends(get_tag_summary_cache),
) -> TagSummaryResponse:
    cached = cache.get(SUMMARY_CACHE_KEY)
    if cached is not None:
        return cached

    generation = cache.generation
    counts = await tag_counts(session)
    summary = TagSummaryResponse(
        tags=[TagCount(name=name, count=count) for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]
    )
    cache.set(SUMMARY_CACHE_KEY, summary, generation=generation)
    return summary
