"""Pydantic models for request bodies and API responses"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.keys import validate_key

MAX_TAG_LENGTH = 64


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class _KeyedRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str

    @field_validator("key")
    @classmethod
    def key_format(cls, v: str) -> str:
        if not validate_key(v):
            raise ValueError("key must be non-empty and use only letters, digits, '.', '_', '-', '/'")
        return v


class TagUpdate(_KeyedRequest):
    tag: str

    @field_validator("tag")
    @classmethod
    def tag_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tag must not be blank")
        if len(v) > MAX_TAG_LENGTH:
            raise ValueError(f"tag must be at most {MAX_TAG_LENGTH} characters")
        return v


class RatingUpdate(_KeyedRequest):
    rating: int = Field(ge=1, le=5, strict=True)


class TopPickUpdate(_KeyedRequest):
    top_pick: bool = Field(alias="topPick", strict=True)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class AssetSummary(BaseModel):
    key: str
    filename: str


class AssetListResponse(BaseModel):
    assets: list[AssetSummary]
    cursor: str | None = None
    has_more: bool = Field(serialization_alias="hasMore")
    total: int


class RenditionUrls(BaseModel):
    thumb: str
    medium: str
    large: str
    original: str
    download: str


class AssetUrlsResponse(BaseModel):
    key: str
    origin: str
    urls: RenditionUrls


class EventAsset(BaseModel):
    key: str
    filename: str
    capture_timestamp: str | None = Field(default=None, serialization_alias="captureTimestamp")
    picked: bool
    rating: int | None = None
    tags: list[str] = Field(default_factory=list)
    urls: RenditionUrls


class EventAssetsResponse(BaseModel):
    property_id: str = Field(serialization_alias="propertyId")
    year: str
    assets: list[EventAsset]
    top_picks: list[str] = Field(serialization_alias="topPicks")
    cursor: str | None = None
    has_more: bool = Field(serialization_alias="hasMore")
    total: int


class TagsResponse(BaseModel):
    key: str
    tags: list[str]


class TagCount(BaseModel):
    name: str
    count: int


class TagSummaryResponse(BaseModel):
    tags: list[TagCount]


class SuccessResponse(BaseModel):
    success: bool = True
