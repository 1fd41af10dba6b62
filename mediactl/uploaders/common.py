"""Common utilities for uploader modules."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from urllib.parse import unquote, urlparse

from mediactl.uploaders.constants import TRANSFER_PROGRESS_END, TRANSFER_PROGRESS_START

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# Characters that would create extra path segments in a storage key
_UNSAFE_NAME_CHARS = re.compile(r"[/\\\x00-\x1f]")


def remap_progress(
    sent: int,
    total: int,
    *,
    start: int = TRANSFER_PROGRESS_START,
    end: int = TRANSFER_PROGRESS_END,
) -> int:
    """Map transferred/total bytes onto the integer range [start, end].

    Args:
        sent: Bytes transferred so far.
        total: Total bytes to transfer.
        start: Value reported at zero bytes.
        end: Value reported once every byte is sent.

    Returns:
        Floored percentage within [start, end].
    """
    if total <= 0:
        return end
    sent = min(max(sent, 0), total)
    return start + (end - start) * sent // total


class ProgressThrottle:
    """Forward byte counts as percentages, only on a genuine advance.

    The callback fires when the remapped value grew by at least one
    point, so values it receives are strictly increasing.
    """

    def __init__(
        self,
        total: int,
        callback: ProgressCallback | None,
        *,
        start: int = TRANSFER_PROGRESS_START,
        end: int = TRANSFER_PROGRESS_END,
    ) -> None:
        self.total = total
        self.callback = callback
        self.start = start
        self.end = end
        self.sent = 0
        self.last = start

    def update(self, nbytes: int) -> None:
        """Record ``nbytes`` more bytes sent."""
        self.sent += nbytes
        progress = remap_progress(self.sent, self.total, start=self.start, end=self.end)
        if progress > self.last:
            self.last = progress
            if self.callback is not None:
                self.callback(progress)

    def finish(self) -> None:
        """Report the end of the range if it has not been reached yet."""
        if self.last < self.end:
            self.last = self.end
            if self.callback is not None:
                self.callback(self.end)


class MonotonicMillis:
    """Epoch-millisecond timestamps that strictly increase per instance."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def __call__(self) -> int:
        now = int(self._clock() * 1000)
        if now <= self._last:
            now = self._last + 1
        self._last = now
        return now


def safe_file_name(name: str) -> str:
    """Make a file name usable as the last segment of a storage key."""
    cleaned = _UNSAFE_NAME_CHARS.sub("_", name).strip()
    return cleaned or "file"


def build_storage_path(uid: str, category: str, timestamp: int, name: str) -> str:
    """Build ``{uid}/{category}/{timestamp}_{name}``."""
    return f"{uid}/{category}/{timestamp}_{safe_file_name(name)}"


def object_path_from_url(url: str) -> str | None:
    """Extract the object path from a store download URL.

    Download URLs look like ``.../o/<url-encoded path>?alt=media&token=...``.

    Returns:
        Decoded object path, or None if the URL has no ``/o/`` segment.
    """
    parsed = urlparse(url)
    match = re.search(r"/o/(.+)$", parsed.path)
    if not match:
        return None
    return unquote(match.group(1))
