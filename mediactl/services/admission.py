"""Client-side admission of file candidates.

Capacity is applied first: candidates past the batch's remaining capacity
are dropped without being examined. The rest are checked for type and size
before any network call; rejections are logged and never abort siblings.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from mediactl.core.exceptions import AdmissionError, TooLargeError, UnsupportedTypeError
from mediactl.models.upload import FileCandidate, Rejection
from mediactl.uploaders.constants import ALLOWED_MIME_PREFIX, MAX_FILE_SIZE, MAX_FILES

logger = logging.getLogger(__name__)


@dataclass
class Batch:
    """Capacity-bounded set of uploads (e.g. the media attached to one post).

    ``occupied`` counts admitted files that have not failed; it is mutated
    only by the orchestrator.
    """

    max_files: int = MAX_FILES
    occupied: int = 0
    closed: bool = False

    @property
    def remaining(self) -> int:
        """Free slots; zero once closed."""
        if self.closed:
            return 0
        return max(0, self.max_files - self.occupied)

    def reserve(self, count: int) -> None:
        """Occupy ``count`` slots.

        Raises:
            ValueError: If that would exceed capacity.
        """
        if count > self.remaining:
            raise ValueError(f"Cannot reserve {count} slots, {self.remaining} remaining")
        self.occupied += count

    def release(self, count: int = 1) -> None:
        """Free slots (failed upload, or media detached by the caller)."""
        self.occupied = max(0, self.occupied - count)

    def close(self) -> None:
        """Stop admitting further files. In-flight uploads are unaffected."""
        self.closed = True


@dataclass
class AdmissionResult:
    """Outcome of one admission call."""

    admitted: list[FileCandidate] = field(default_factory=list)
    rejections: list[Rejection] = field(default_factory=list)
    truncated: int = 0


class FileAdmissionFilter:
    """Validates candidates against type and size limits."""

    def __init__(
        self,
        allowed_mime_prefix: str = ALLOWED_MIME_PREFIX,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self.allowed_mime_prefix = allowed_mime_prefix
        self.max_file_size = max_file_size

    def check(self, candidate: FileCandidate) -> None:
        """Validate a single candidate.

        Raises:
            UnsupportedTypeError: If the mime type lacks the allowed prefix.
            TooLargeError: If the size exceeds the ceiling.
        """
        if not candidate.mime_type.startswith(self.allowed_mime_prefix):
            raise UnsupportedTypeError(
                candidate.name, candidate.mime_type, self.allowed_mime_prefix
            )
        if candidate.byte_size > self.max_file_size:
            raise TooLargeError(candidate.name, candidate.byte_size, self.max_file_size)

    def admit(self, candidates: Sequence[FileCandidate], remaining: int) -> AdmissionResult:
        """Select the candidates to upload, in submission order.

        Args:
            candidates: Files submitted in one call.
            remaining: Free slots in the batch.

        Returns:
            Admitted candidates, rejections and the number truncated.
        """
        window = list(candidates[: max(0, remaining)])
        result = AdmissionResult(truncated=len(candidates) - len(window))
        if result.truncated:
            logger.info("Batch capacity reached, ignoring %d file(s)", result.truncated)

        for candidate in window:
            try:
                self.check(candidate)
            except AdmissionError as e:
                reason = "unsupported_type" if isinstance(e, UnsupportedTypeError) else "too_large"
                logger.warning("Skipping %s", e.message)
                result.rejections.append(Rejection(candidate.name, reason, e.message))
                continue
            result.admitted.append(candidate)

        return result
