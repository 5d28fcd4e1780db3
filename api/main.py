"""Entrypoint for the gallery asset gateway"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.routes import assets, curation, events, tags
from core.asset_store import build_asset_store
from core.cache import TTLCache
from core.config import settings
from core.log import configure_logging
from db.session import dispose_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    await init_db()
    app.state.asset_store = build_asset_store(settings)
    app.state.tag_summary_cache = TTLCache(settings.TAG_SUMMARY_TTL_SECONDS)
    try:
        yield
    finally:
        await app.state.asset_store.aclose()
        await dispose_db()


app = FastAPI(
    title="Gallery Asset Gateway",
    version="0.1.0",
    description="Listing, streaming serve and curation for gallery photos held in a blob store",
    lifespan=lifespan,
)

register_error_handlers(app)
app.include_router(assets.router)
app.include_router(curation.router)
app.include_router(events.router)
app.include_router(tags.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
