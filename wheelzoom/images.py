"""Intrinsic width probing for zoomed images.

When an image gets its first size annotation the width is capped to the
image's natural width, so small images are not blown up to the default
size.  Remote images are downloaded with ``httpx``; local images are read
from disk.  The pixel width is decoded with ``pymupdf``.

Probing is best effort: any failure is logged and reported as ``None``,
and the caller falls back to the configured default.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlsplit

import httpx
import pymupdf

from wheelzoom.syntax import LOCAL_URI_PREFIXES, REMOTE_PREFIXES

_log = logging.getLogger("images")

_DEFAULT_TIMEOUT_S = 10.0
"""Timeout for downloading a remote image."""


def local_path_from_uri(image_uri: str) -> Path | None:
    """Return the filesystem path behind a local image URI.

    Handles ``app://<host>/<path>?<timestamp>`` and ``file://`` URIs.
    Windows drive paths (``/C:/...``) lose their leading slash.

    >>> local_path_from_uri("app://local/home/me/notes/a%20b.png?123")
    PosixPath('/home/me/notes/a b.png')
    """
    if not image_uri.startswith(LOCAL_URI_PREFIXES):
        return None
    parts = urlsplit(image_uri)
    path = unquote(parts.path)
    if not path:
        return None
    if len(path) > 2 and path[0] == "/" and path[2] == ":":
        path = path[1:]
    return Path(path)


def _decode_width(data: bytes | str) -> int | None:
    """Decode an image (bytes or filename) and return its pixel width."""
    try:
        pix = pymupdf.Pixmap(data)
    except Exception as exc:
        _log.debug("  Could not decode image: %s", exc)
        return None
    return pix.width or None


def _probe_remote(url: str, timeout: float) -> int | None:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        _log.warning("Could not fetch %s: %s", url, exc)
        return None
    _log.debug("  Fetched %s (%d bytes)", url, len(response.content))
    return _decode_width(response.content)


def _probe_local(path: Path) -> int | None:
    if not path.is_file():
        _log.debug("  Local image not found: %s", path)
        return None
    return _decode_width(str(path))


def probe_natural_width(
    source: str | Path,
    *,
    timeout: float = _DEFAULT_TIMEOUT_S,
) -> int | None:
    """Return the natural pixel width of an image, or ``None``.

    Args:
        source: Remote URL, local image URI, or filesystem path.
        timeout: Download timeout for remote images (seconds).
    """
    if isinstance(source, Path):
        width = _probe_local(source)
    elif source.startswith(REMOTE_PREFIXES):
        width = _probe_remote(source, timeout)
    else:
        path = local_path_from_uri(source)
        width = _probe_local(path) if path is not None else None
    _log.debug("  Natural width of %s: %s", source, width)
    return width
