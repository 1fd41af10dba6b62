"""Byte transports for mediactl.

This module provides the two ways file bytes leave the client:
- Proxy transfer (multipart upload through the backend, with progress)
- Fallback storage (direct upload to a blob store)

These are internal implementation details. Use `UploadOrchestrator` from
`mediactl.services.uploads` as the public API.
"""

from mediactl.uploaders.common import (
    MonotonicMillis,
    ProgressThrottle,
    build_storage_path,
    object_path_from_url,
    remap_progress,
)
from mediactl.uploaders.constants import (
    ALLOWED_MIME_PREFIX,
    DEFAULT_UPLOAD_WORKERS,
    MAX_FILE_SIZE,
    MAX_FILES,
    SUCCESS_GRACE_SECONDS,
    TRANSFER_PROGRESS_END,
    TRANSFER_PROGRESS_START,
)
from mediactl.uploaders.fallback import FallbackStorageClient
from mediactl.uploaders.proxy import ProgressStream, ProxyTransferer

__all__ = [
    # Constants
    "ALLOWED_MIME_PREFIX",
    "DEFAULT_UPLOAD_WORKERS",
    "MAX_FILE_SIZE",
    "MAX_FILES",
    "SUCCESS_GRACE_SECONDS",
    "TRANSFER_PROGRESS_END",
    "TRANSFER_PROGRESS_START",
    # Common utilities
    "MonotonicMillis",
    "ProgressThrottle",
    "build_storage_path",
    "object_path_from_url",
    "remap_progress",
    # Transports
    "ProgressStream",
    "ProxyTransferer",
    "FallbackStorageClient",
]
