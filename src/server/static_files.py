"""Static asset lookup for the UI root, with content-type detection."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional

_TEXT_MIME_TYPES = {
    "application/javascript",
    "application/json",
    "application/manifest+json",
    "image/svg+xml",
}


def resolve_static_file(ui_root: Path, request_path: str) -> Optional[Path]:
    """Map a request path to a file under ``ui_root``.

    Returns ``None`` for the root path, hidden path segments, anything that
    escapes the root, and paths that are not regular files.
    """
    relative = (request_path or "").lstrip("/")
    if not relative:
        return None
    if any(part.startswith(".") for part in relative.split("/") if part):
        return None

    root = ui_root.resolve()
    candidate = (root / relative).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


def guess_content_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    if not mime_type:
        return "application/octet-stream"
    if mime_type.startswith("text/") or mime_type in _TEXT_MIME_TYPES:
        return f"{mime_type}; charset=utf-8"
    return mime_type


def load_static_asset(ui_root: Path, request_path: str) -> Optional[tuple[bytes, str]]:
    """Read an asset for serving; ``None`` when it cannot be served."""
    path = resolve_static_file(ui_root, request_path)
    if path is None:
        return None
    try:
        body = path.read_bytes()
    except OSError:
        return None
    return body, guess_content_type(path)
