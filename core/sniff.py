"""Content-type detection from a payload's leading bytes, then the key's extension."""

from __future__ import annotations

from core.keys import derive_filename

# Never look further into a payload than this
SNIFF_BYTES = 16

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_EXTENSION_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


def sniff_signature(head: bytes) -> str | None:
    head = head[:SNIFF_BYTES]
    if head[:2] == b"\xff\xd8":
        return "image/jpeg"
    if head[:4] == b"\x89PNG":
        return "image/png"
    if b"WEBP" in head[:12]:
        return "image/webp"
    return None


def content_type_from_extension(key: str) -> str | None:
    filename = derive_filename(key)
    if "." not in filename:
        return None
    ext = filename.rsplit(".", 1)[-1].lower()
    return _EXTENSION_TYPES.get(ext)


def sniff_content_type(head: bytes, key: str) -> str:
    return sniff_signature(head) or content_type_from_extension(key) or DEFAULT_CONTENT_TYPE
