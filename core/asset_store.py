"""Asset store interface plus local filesystem and REST implementations.

The store owns the bytes. Callers get a transient read handle per request
(``StoredBlob``) and must release it with ``aclose()``; nothing here caches
bytes or metadata between calls.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

import anyio
import httpx

from core.config import Settings, settings
from core.errors import StoreUnavailable
from core.streams import BlobSource, as_chunk_stream

logger = logging.getLogger(__name__)

METADATA_HEADER = "x-blob-metadata"


@dataclass(frozen=True)
class StoreEntry:
    key: str
    etag: str = ""


@dataclass
class StoredBlob:
    chunks: AsyncIterator[bytes]
    metadata: dict[str, Any] = field(default_factory=dict)
    size: int | None = None
    etag: str | None = None
    release: Callable[[], Awaitable[None]] | None = None

    @classmethod
    def from_source(
        cls,
        source: BlobSource,
        metadata: dict[str, Any] | None = None,
        size: int | None = None,
        etag: str | None = None,
        release: Callable[[], Awaitable[None]] | None = None,
    ) -> StoredBlob:
        if size is None and isinstance(source, (bytes, bytearray, memoryview)):
            size = len(source)
        return cls(
            chunks=as_chunk_stream(source),
            metadata=metadata or {},
            size=size,
            etag=etag,
            release=release,
        )

    async def aclose(self) -> None:
        aclose = getattr(self.chunks, "aclose", None)
        if aclose is not None:
            await aclose()
        if self.release is not None:
            release, self.release = self.release, None
            await release()


class AssetStore(Protocol):
    async def list(self, prefix: str = "") -> list[StoreEntry]:
        """All entries whose key starts with prefix, in store order."""
        ...

    async def get_with_metadata(self, key: str) -> StoredBlob | None:
        """Bytes and metadata in one call; None if the key does not exist."""
        ...

    async def aclose(self) -> None:
        ...


class LocalFsAssetStore:
    """Filesystem-backed asset store.

    Layout: {root}/blobs/{key} for bytes, {root}/meta/{key}.json for metadata.
    """

    def __init__(self, root: str | Path | None = None, chunk_size: int | None = None) -> None:
        self._root = Path(root) if root else Path(settings.ASSET_STORE_PATH)
        self._chunk_size = chunk_size or settings.STREAM_CHUNK_SIZE

    @property
    def _blob_root(self) -> Path:
        return self._root / "blobs"

    def _blob_path(self, key: str) -> Path | None:
        base = self._blob_root.resolve()
        path = (base / key).resolve()
        # Keys resolving outside the blob root do not exist
        if path == base or base not in path.parents:
            return None
        return path

    def _meta_path(self, key: str) -> Path:
        return self._root / "meta" / f"{key}.json"

    def put_bytes(self, key: str, data: bytes, metadata: dict[str, Any] | None = None) -> None:
        path = self._blob_path(key)
        if path is None:
            raise ValueError(f"Invalid asset key: {key}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        if metadata is not None:
            meta_path = self._meta_path(key)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.write_text(json.dumps(metadata))

    def _list_sync(self, prefix: str) -> list[StoreEntry]:
        root = self._blob_root
        if not root.exists():
            return []
        entries: list[StoreEntry] = []
        for path in root.rglob("*"):
            if not path.is_file():
                continue
            key = path.relative_to(root).as_posix()
            if not key.startswith(prefix):
                continue
            stat = path.stat()
            entries.append(StoreEntry(key=key, etag=f'"{stat.st_mtime_ns:x}-{stat.st_size:x}"'))
        entries.sort(key=lambda e: e.key)
        return entries

    async def list(self, prefix: str = "") -> list[StoreEntry]:
        try:
            return await anyio.to_thread.run_sync(self._list_sync, prefix)
        except OSError as exc:
            raise StoreUnavailable(f"list {prefix!r} failed: {exc}") from exc

    def _open_sync(self, key: str):
        path = self._blob_path(key)
        if path is None or not path.is_file():
            return None
        meta_path = self._meta_path(key)
        metadata = json.loads(meta_path.read_text()) if meta_path.exists() else {}
        stat = path.stat()
        handle = path.open("rb")
        return handle, metadata, stat

    async def get_with_metadata(self, key: str) -> StoredBlob | None:
        try:
            opened = await anyio.to_thread.run_sync(self._open_sync, key)
        except (OSError, ValueError) as exc:
            raise StoreUnavailable(f"get {key!r} failed: {exc}") from exc
        if opened is None:
            return None
        handle, metadata, stat = opened

        async def read_chunks() -> AsyncIterator[bytes]:
            while True:
                chunk = await anyio.to_thread.run_sync(handle.read, self._chunk_size)
                if not chunk:
                    break
                yield chunk

        async def release() -> None:
            await anyio.to_thread.run_sync(handle.close)

        return StoredBlob.from_source(
            read_chunks(),
            metadata=metadata,
            size=stat.st_size,
            etag=f'"{stat.st_mtime_ns:x}-{stat.st_size:x}"',
            release=release,
        )

    async def aclose(self) -> None:
        return None


def decode_metadata_header(value: str | None) -> dict[str, Any]:
    """Blob metadata travels as JSON, optionally as ``b64;<base64 JSON>``."""
    if not value:
        return {}
    try:
        if value.startswith("b64;"):
            value = base64.b64decode(value[4:]).decode("utf-8")
        decoded = json.loads(value)
    except (ValueError, UnicodeDecodeError):
        logger.warning("Ignoring undecodable blob metadata header")
        return {}
    return decoded if isinstance(decoded, dict) else {}


class HttpAssetStore:
    """REST blob store reached through a shared httpx.AsyncClient.

    ``GET {base}?prefix=&cursor=`` lists as ``{"blobs": [{"key", "etag"}],
    "next_cursor"}``; ``GET {base}/{key}`` returns the bytes with metadata in
    the ``x-blob-metadata`` header.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        token: str = "",
        chunk_size: int | None = None,
        owns_client: bool = False,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._chunk_size = chunk_size or settings.STREAM_CHUNK_SIZE
        self._owns_client = owns_client

    @staticmethod
    def _escapes_store(key: str) -> bool:
        # Dot segments would be normalized away by the URL layer
        return any(segment in ("", ".", "..") for segment in key.split("/"))

    def _blob_url(self, key: str) -> str:
        return f"{self._base_url}/{quote(key, safe='/')}"

    async def list(self, prefix: str = "") -> list[StoreEntry]:
        entries: list[StoreEntry] = []
        cursor: str | None = None
        while True:
            params = {"prefix": prefix}
            if cursor:
                params["cursor"] = cursor
            try:
                resp = await self._client.get(self._base_url, params=params, headers=self._headers)
                resp.raise_for_status()
                body = resp.json()
                for blob in body.get("blobs", []):
                    entries.append(StoreEntry(key=blob["key"], etag=blob.get("etag", "")))
                cursor = body.get("next_cursor")
            except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as exc:
                raise StoreUnavailable(f"list {prefix!r} failed: {exc}") from exc
            if not cursor:
                return entries

    async def get_with_metadata(self, key: str) -> StoredBlob | None:
        if self._escapes_store(key):
            return None
        request = self._client.build_request("GET", self._blob_url(key), headers=self._headers)
        try:
            resp = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise StoreUnavailable(f"get {key!r} failed: {exc}") from exc

        if resp.status_code == 404:
            await resp.aclose()
            return None
        if resp.status_code >= 400:
            await resp.aclose()
            raise StoreUnavailable(f"get {key!r} returned HTTP {resp.status_code}")

        length = resp.headers.get("content-length")
        # aiter_bytes decodes content-encoding, so the upstream length no longer applies
        if resp.headers.get("content-encoding"):
            length = None
        return StoredBlob.from_source(
            resp.aiter_bytes(self._chunk_size),
            metadata=decode_metadata_header(resp.headers.get(METADATA_HEADER)),
            size=int(length) if length and length.isdigit() else None,
            etag=resp.headers.get("etag"),
            release=resp.aclose,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def build_asset_store(config: Settings = settings) -> AssetStore:
    if config.ASSET_STORE_BACKEND == "http":
        client = httpx.AsyncClient(timeout=config.ASSET_STORE_TIMEOUT_SECONDS)
        base_url = f"{config.ASSET_STORE_API_URL.rstrip('/')}/{config.ASSET_STORE_NAME}"
        return HttpAssetStore(
            client,
            base_url,
            token=config.ASSET_STORE_TOKEN,
            chunk_size=config.STREAM_CHUNK_SIZE,
            owns_client=True,
        )
    if config.ASSET_STORE_BACKEND == "local":
        root = Path(config.ASSET_STORE_PATH) / config.ASSET_STORE_NAME
        return LocalFsAssetStore(root, chunk_size=config.STREAM_CHUNK_SIZE)
    raise ValueError(f"Unknown ASSET_STORE_BACKEND: {config.ASSET_STORE_BACKEND}")
