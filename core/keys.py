"""Asset key parsing: validation, capture timestamp, status tokens, filenames.

Keys are opaque path-like strings written by the uploader, e.g.
``parties/2025/the-archive/2025FRED_20250807180510_UNPICKED``. Nothing in here
raises on a malformed key; only ``validate_key`` signals rejection and only the
serve path acts on it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_KEY_PATTERN = re.compile(r"[A-Za-z0-9._/-]+")

TIMESTAMP_LENGTH = 14

PICKED_TOKEN = "PICKED"
UNPICKED_TOKEN = "UNPICKED"


def validate_key(key: object) -> bool:
    """True iff key is a non-empty string of ``[A-Za-z0-9._/-]`` only."""
    if not isinstance(key, str) or not key:
        return False
    return _KEY_PATTERN.fullmatch(key) is not None


def extract_timestamp(key: str) -> str | None:
    """Return the first ``_``-delimited segment that is exactly 14 ASCII digits."""
    for segment in key.split("_"):
        if len(segment) == TIMESTAMP_LENGTH and segment.isascii() and segment.isdigit():
            return segment
    return None


def has_status_token(key: str, token: str) -> bool:
    """Case-sensitive substring check.

    "x_UNPICKED" contains "PICKED", so this returns True for it. Use
    ``is_picked`` when picked and unpicked must be told apart.
    """
    return token in key


def is_picked(key: str) -> bool:
    if has_status_token(key, UNPICKED_TOKEN):
        return False
    return has_status_token(key, PICKED_TOKEN)


def derive_filename(key: str) -> str:
    return key.rsplit("/", 1)[-1]


def capture_sort_key(key: str) -> str:
    # Keys without a timestamp sort lowest
    return extract_timestamp(key) or ""


@dataclass(frozen=True)
class KeyInfo:
    key: str
    valid: bool
    filename: str
    timestamp: str | None
    picked: bool

    @property
    def kind(self) -> str:
        return "structured" if self.timestamp else "raw"


def parse_key(key: str) -> KeyInfo:
    return KeyInfo(
        key=key,
        valid=validate_key(key),
        filename=derive_filename(key),
        timestamp=extract_timestamp(key),
        picked=is_picked(key),
    )
