"""Absolute origin (scheme://host[:port]) for building serve and transform URLs.

Precedence: browser location > forwarded headers > configured site URL >
local default. Forwarded headers win over the configured URL whenever they
are present, so anything able to set X-Forwarded-Host in front of the trusted
proxy can steer generated URLs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from starlette.requests import Request

DEFAULT_ORIGIN = "http://localhost:8888"

_HOST_PATTERN = re.compile(r"[A-Za-z0-9.-]+(:[0-9]{1,5})?|\[[0-9A-Fa-f:.]+\](:[0-9]{1,5})?")


@dataclass(frozen=True)
class OriginContext:
    # Set only when running with access to the end user's location
    location_origin: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    site_url: str | None = None

    @classmethod
    def from_request(cls, request: Request, site_url: str | None = None) -> OriginContext:
        return cls(headers=request.headers, site_url=site_url)


def _first(value: str | None) -> str:
    if not value:
        return ""
    return value.split(",", 1)[0].strip()


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.title())
    return _first(value)


def _normalize(url: str | None) -> str | None:
    if not url:
        return None
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def _from_forwarded(headers: Mapping[str, str]) -> str | None:
    host = _header(headers, "x-forwarded-host")
    if not host or not _HOST_PATTERN.fullmatch(host):
        return None
    proto = _header(headers, "x-forwarded-proto").lower()
    if proto not in ("http", "https"):
        proto = "https"
    return f"{proto}://{host}"


def resolve_origin(ctx: OriginContext, default: str = DEFAULT_ORIGIN) -> str:
    try:
        return (
            _normalize(ctx.location_origin)
            or _from_forwarded(ctx.headers)
            or _normalize(ctx.site_url)
            or default
        )
    except Exception:
        return default
