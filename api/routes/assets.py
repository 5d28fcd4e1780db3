"""Asset endpoints: list, serve, rendition URLs"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from api.deps import get_gateway, get_paginator
from api.responses import AssetStreamingResponse
from core.config import settings
from core.errors import InvalidKeyFormat, MissingKey
from core.gateway import AssetGateway
from core.keys import validate_key
from core.models import AssetListResponse, AssetSummary, AssetUrlsResponse, RenditionUrls
from core.origin import OriginContext, resolve_origin
from core.paginator import AssetPaginator
from core.transform import build_renditions

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("", response_model=AssetListResponse)
async def list_assets(
    prefix: str = Query(""),
    limit: int = Query(settings.LIST_DEFAULT_LIMIT),
    cursor: str | None = Query(None),
    paginator: AssetPaginator = Depends(get_paginator),
) -> AssetListResponse:
    page = await paginator.list(prefix, limit=limit, cursor=cursor or None)
    return AssetListResponse(
        assets=[AssetSummary(key=r.key, filename=r.filename) for r in page.records],
        cursor=page.next_cursor,
        has_more=page.has_more,
        total=page.total,
    )


@router.get("/serve")
async def serve_asset(
    key: str | None = Query(None),
    download: str | None = Query(None),
    gateway: AssetGateway = Depends(get_gateway),
) -> AssetStreamingResponse:
    served = await gateway.serve(key, download=download == "1")
    return AssetStreamingResponse(served.body, status_code=served.status, headers=served.headers)


@router.get("/urls", response_model=AssetUrlsResponse)
async def asset_urls(request: Request, key: str | None = Query(None)) -> AssetUrlsResponse:
    if not key:
        raise MissingKey()
    if not validate_key(key):
        raise InvalidKeyFormat(key)
    origin = resolve_origin(
        OriginContext.from_request(request, settings.SITE_URL), default=settings.DEFAULT_ORIGIN
    )
    return AssetUrlsResponse(key=key, origin=origin, urls=RenditionUrls(**build_renditions(origin, key)))
