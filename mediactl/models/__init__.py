"""Data models for mediactl.

Provides wire payload models (Pydantic) and dataclasses for upload
state tracking.
"""

from __future__ import annotations

from .base import BaseModel
from .progress import (
    BatchResult,
    EventKind,
    TaskState,
    UploadEvent,
    UploadTask,
)
from .upload import (
    ConfirmedUpload,
    ConfirmRequest,
    ConfirmResponse,
    DownloadUrlResponse,
    FileCandidate,
    PerFileError,
    PresignRequest,
    PresignResponse,
    Rejection,
    StoredObject,
    UploadResult,
    UploadSession,
    UploadSource,
)

__all__ = [
    # Base
    "BaseModel",
    # Upload objects
    "FileCandidate",
    "UploadSession",
    "ConfirmedUpload",
    "UploadResult",
    "UploadSource",
    "PerFileError",
    "Rejection",
    # Wire payloads
    "PresignRequest",
    "PresignResponse",
    "ConfirmRequest",
    "ConfirmResponse",
    "DownloadUrlResponse",
    "StoredObject",
    # Progress
    "TaskState",
    "UploadTask",
    "EventKind",
    "UploadEvent",
    "BatchResult",
]
