"""SQLAlchemy ORM models for curation data (tags, ratings, top picks)."""

from sqlalchemy import JSON, BigInteger, Boolean, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class AssetMetadataRow(Base):
    """Curation state keyed by asset key. Blob bytes and blob metadata stay in the store."""

    __tablename__ = "asset_metadata"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    tags: Mapped[list] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list
    )
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    top_pick: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
