"""Request-scoped dependencies built from objects created once in the lifespan hook"""

from __future__ import annotations

from fastapi import Depends, Request

from core.asset_store import AssetStore
from core.cache import TTLCache
from core.config import settings
from core.gateway import AssetGateway
from core.log import StdlibStructuredLogger, StructuredLogger
from core.paginator import AssetPaginator


def get_asset_store(request: Request) -> AssetStore:
    return request.app.state.asset_store


def get_tag_summary_cache(request: Request) -> TTLCache:
    return request.app.state.tag_summary_cache


def get_gateway_logger() -> StructuredLogger:
    return StdlibStructuredLogger("gateway")


def get_gateway(
    store: AssetStore = Depends(get_asset_store),
    logger: StructuredLogger = Depends(get_gateway_logger),
) -> AssetGateway:
    return AssetGateway(store, logger)


def get_paginator(store: AssetStore = Depends(get_asset_store)) -> AssetPaginator:
    return AssetPaginator(store, max_limit=settings.LIST_MAX_LIMIT)
