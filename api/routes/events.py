"""Event gallery endpoint: one property's photos for one year"""

from __future__ import annotations

import re

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_paginator
from core.config import settings
from core.errors import InvalidKeyFormat
from core.keys import parse_key, validate_key
from core.models import EventAsset, EventAssetsResponse, RenditionUrls
from core.origin import OriginContext, resolve_origin
from core.paginator import AssetPaginator
from core.transform import build_renditions
from db.curation import rows_for_keys
from db.session import get_session_dep

router = APIRouter(prefix="/events", tags=["events"])

_YEAR = re.compile(r"[0-9]{4}")


def event_prefix(property_id: str, year: str) -> str:
    return f"parties/{year}/{property_id}/"


@router.get("/{property_id}/{year}", response_model=EventAssetsResponse)
async def event_assets(
    property_id: str,
    year: str,
    request: Request,
    limit: int = Query(settings.LIST_DEFAULT_LIMIT),
    cursor: str | None = Query(None),
    paginator: AssetPaginator = Depends(get_paginator),
    session: AsyncSession = Depends(get_session_dep),
) -> EventAssetsResponse:
    if not _YEAR.fullmatch(year) or "/" in property_id or not validate_key(property_id):
        raise InvalidKeyFormat(f"{property_id}/{year}")

    page = await paginator.list(event_prefix(property_id, year), limit=limit, cursor=cursor or None)
    rows = await rows_for_keys(session, [r.key for r in page.records])
    origin = resolve_origin(
        OriginContext.from_request(request, settings.SITE_URL), default=settings.DEFAULT_ORIGIN
    )

    assets: list[EventAsset] = []
    for record in page.records:
        info = parse_key(record.key)
        row = rows.get(record.key)
        picked = info.picked or "/top/" in record.key or bool(row and row.top_pick)
        assets.append(EventAsset(
            key=record.key,
            filename=info.filename,
            capture_timestamp=info.timestamp,
            picked=picked,
            rating=row.rating if row else None,
            tags=list(row.tags) if row else [],
            urls=RenditionUrls(**build_renditions(origin, record.key)),
        ))

    return EventAssetsResponse(
        property_id=property_id,
        year=year,
        assets=assets,
        top_picks=[a.key for a in assets if a.picked],
        cursor=page.next_cursor,
        has_more=page.has_more,
        total=page.total,
    )
