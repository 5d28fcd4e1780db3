"""Curation endpoints: star ratings and top picks"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.models import SuccessResponse
from core.validation import validate_rating_update, validate_top_pick_update
from db.curation import get_or_create_row, touch
from db.session import get_session_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assets", tags=["curation"])


@router.post("/rating", response_model=SuccessResponse)
async def update_rating(
    body: dict,
    session: AsyncSession = Depends(get_session_dep),
) -> SuccessResponse:
    update = validate_rating_update(body)
    row = await get_or_create_row(session, update.key)
    row.rating = update.rating
    touch(row)
    await session.flush()
    logger.info("Rating for %s set to %d", update.key, update.rating)
    return SuccessResponse()


@router.post("/top-pick", response_model=SuccessResponse)
async def update_top_pick(
    body: dict,
    session: AsyncSession = Depends(get_session_dep),
) -> SuccessResponse:
    update = validate_top_pick_update(body)
    row = await get_or_create_row(session, update.key)
    row.top_pick = update.top_pick
    touch(row)
    await session.flush()
    logger.info("Top pick for %s set to %s", update.key, update.top_pick)
    return SuccessResponse()
