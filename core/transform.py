"""URLs for the serve endpoint and the image-transform CDN wrapped around it."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from core.config import settings

# name -> (width, height, fit, quality, format)
RENDITIONS: dict[str, tuple[int | None, int | None, str | None, int, str]] = {
    "thumb": (400, 400, "cover", 75, "webp"),
    "medium": (1024, None, None, 85, "webp"),
    "large": (2048, None, None, 90, "webp"),
}


def build_serve_url(origin: str, key: str, download: bool = False, serve_path: str | None = None) -> str:
    path = serve_path or settings.SERVE_PATH
    url = f"{origin.rstrip('/')}{path}?key={quote(key, safe='')}"
    if download:
        url += "&download=1"
    return url


def build_transform_url(
    origin: str,
    key: str,
    width: int | None = None,
    height: int | None = None,
    fit: str | None = None,
    quality: int | None = None,
    fmt: str | None = None,
    transform_path: str | None = None,
) -> str:
    """``<origin><transform_path>?url=<encoded absolute serve URL>&w=&h=&fit=&q=&fm=``"""
    params: list[tuple[str, str]] = [("url", build_serve_url(origin, key))]
    for name, value in (("w", width), ("h", height), ("fit", fit), ("q", quality), ("fm", fmt)):
        if value is not None:
            params.append((name, str(value)))
    path = transform_path or settings.TRANSFORM_PATH
    return f"{origin.rstrip('/')}{path}?{urlencode(params, quote_via=quote, safe='')}"


def build_renditions(origin: str, key: str) -> dict[str, str]:
    urls = {
        name: build_transform_url(origin, key, w, h, fit, q, fm)
        for name, (w, h, fit, q, fm) in RENDITIONS.items()
    }
    # Raw serve URL stays a stable fallback when the CDN transform fails
    urls["original"] = build_serve_url(origin, key)
    urls["download"] = build_serve_url(origin, key, download=True)
    return urls
