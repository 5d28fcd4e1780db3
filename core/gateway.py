"""Serve pipeline: key → store lookup → content type → cache headers → byte stream.

Stateless per call. The store handle is passed in; the only thing held across
a request is the blob's read handle, which is always released when the body
stream ends, fails, or is closed early.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from core.asset_store import AssetStore, StoredBlob
from core.config import Settings, settings
from core.errors import AssetNotFound, InvalidKeyFormat, MissingKey, ServeFailed
from core.keys import derive_filename, validate_key
from core.log import StdlibStructuredLogger, StructuredLogger
from core.sniff import SNIFF_BYTES, sniff_content_type
from core.streams import peek_prefix


@dataclass
class ServedAsset:
    status: int
    headers: dict[str, str]
    body: AsyncIterator[bytes]


def cache_headers(key: str, config: Settings = settings) -> dict[str, str]:
    policy = f"public, max-age={config.CACHE_MAX_AGE_SECONDS}, immutable"
    return {
        "Cache-Control": policy,
        config.CDN_CACHE_CONTROL_HEADER: policy,
        # Purge tag: lets the edge invalidate this one asset
        config.CACHE_TAG_HEADER: key,
    }


class AssetGateway:
    def __init__(
        self,
        store: AssetStore,
        logger: StructuredLogger | None = None,
        config: Settings = settings,
    ) -> None:
        self._store = store
        self._log = logger or StdlibStructuredLogger(__name__)
        self._config = config

    async def serve(self, key: str | None, download: bool = False) -> ServedAsset:
        if not key:
            self._log.log(logging.DEBUG, "Serve rejected", reason="missing key")
            raise MissingKey()
        if not validate_key(key):
            self._log.log(logging.DEBUG, "Serve rejected", reason="invalid key format", key=key)
            raise InvalidKeyFormat(key)

        try:
            blob = await self._store.get_with_metadata(key)
        except Exception as exc:
            self._log.log(logging.ERROR, "Store lookup failed", key=key, cause=repr(exc))
            raise ServeFailed(str(exc)) from exc

        if blob is None:
            self._log.log(logging.DEBUG, "Asset not found", key=key)
            raise AssetNotFound(key)

        try:
            head, chunks = await peek_prefix(blob.chunks, SNIFF_BYTES)
            content_type = blob.metadata.get("contentType") or sniff_content_type(head, key)
            headers = self._build_headers(key, blob, content_type, download)
        except Exception as exc:
            self._log.log(logging.ERROR, "Serve failed before transfer", key=key, cause=repr(exc))
            await self._release(key, blob)
            raise ServeFailed(str(exc)) from exc

        return ServedAsset(status=200, headers=headers, body=self._stream(key, blob, chunks))

    def _build_headers(self, key: str, blob: StoredBlob, content_type: str, download: bool) -> dict[str, str]:
        headers = {
            "Content-Type": str(content_type),
            "X-Content-Type-Options": "nosniff",
            **cache_headers(key, self._config),
        }
        if download:
            headers["Content-Disposition"] = f'attachment; filename="{derive_filename(key)}"'
        if blob.size is not None:
            headers["Content-Length"] = str(blob.size)
        if blob.etag:
            headers["ETag"] = blob.etag
        return headers

    async def _stream(self, key: str, blob: StoredBlob, chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
        sent = 0
        try:
            async for chunk in chunks:
                sent += len(chunk)
                yield chunk
        except Exception as exc:
            # Headers are already out; the connection gets aborted
            self._log.log(logging.ERROR, "Stream failed mid-transfer", key=key, sent=sent, cause=repr(exc))
            raise
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()
            await self._release(key, blob)

    async def _release(self, key: str, blob: StoredBlob) -> None:
        try:
            await blob.aclose()
        except Exception as exc:
            self._log.log(logging.WARNING, "Releasing blob handle failed", key=key, cause=repr(exc))
