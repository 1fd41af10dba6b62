"""Input validation helpers for mediactl."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlparse

from mediactl.core.exceptions import InvalidURLError, ValidationError

# Backend-issued folder ids are opaque but never contain path separators
PARENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-.:]+$")


def validate_server_url(url: str) -> str:
    """Validate and normalize a server base URL.

    Args:
        url: URL to validate.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If the URL is not an absolute http(s) URL.
    """
    if not url or not url.strip():
        raise InvalidURLError(url or "", "URL is empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")

    return url.rstrip("/")


def validate_parent_id(parent_id: str | None) -> str | None:
    """Validate an optional parent/container id."""
    if parent_id is None:
        return None
    parent_id = parent_id.strip()
    if not parent_id:
        return None
    if not PARENT_ID_PATTERN.match(parent_id):
        raise ValidationError(f"Invalid parent id: {parent_id}", field="parent_id", value=parent_id)
    return parent_id


def validate_max_files(max_files: int) -> int:
    """Validate batch capacity."""
    if max_files < 1:
        raise ValidationError(
            f"Invalid max files: {max_files} (must be >= 1)",
            field="max_files",
            value=max_files,
        )
    return max_files


def validate_workers(workers: int) -> int:
    """Validate concurrent pipeline count."""
    if workers < 1 or workers > 16:
        raise ValidationError(
            f"Invalid workers: {workers} (must be 1-16)",
            field="workers",
            value=workers,
        )
    return workers


def validate_path_exists(path: Path) -> Path:
    """Validate that a path exists and is a regular file."""
    if not path.exists():
        raise ValidationError(f"Path does not exist: {path}", field="path", value=str(path))
    if not path.is_file():
        raise ValidationError(f"Not a file: {path}", field="path", value=str(path))
    return path
