"""Upload data model: file candidates, sessions, results and wire payloads."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import Field

from .base import BaseModel

# =============================================================================
# Caller-side Objects
# =============================================================================


@dataclass(frozen=True)
class FileCandidate:
    """Raw file handed to the engine by the caller."""

    name: str
    data: bytes
    mime_type: str = ""

    @property
    def byte_size(self) -> int:
        """Size of the payload in bytes."""
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, mime_type: Optional[str] = None) -> "FileCandidate":
        """Read a local file, guessing its mime type from the name."""
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type or "")

    def __repr__(self) -> str:
        return (
            f"FileCandidate(name={self.name!r}, byte_size={self.byte_size}, "
            f"mime_type={self.mime_type!r})"
        )


class UploadSource(Enum):
    """Which path produced an upload result."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class UploadSession:
    """Backend-issued handle scoping one file's transfer and confirmation."""

    session_id: str
    storage_key: str


@dataclass(frozen=True)
class ConfirmedUpload:
    """Durable record returned by the confirm step."""

    file_id: str
    file_url: Optional[str] = None


@dataclass(frozen=True)
class UploadResult:
    """A file that reached Complete.

    ``url`` may be short-lived; re-resolve it from ``file_id`` when it is
    consumed later. It is None when resolution failed and the backend
    returned no direct URL.
    """

    file_id: str
    url: Optional[str]
    source: UploadSource = UploadSource.PRIMARY
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to the ``{fileId, url}`` shape consumed by record creation."""
        return {"fileId": self.file_id, "url": self.url}


@dataclass(frozen=True)
class PerFileError:
    """One file that reached Failed."""

    task_id: str
    file_name: str
    kind: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "task_id": self.task_id,
            "file": self.file_name,
            "kind": self.kind,
            "message": self.message,
        }


@dataclass(frozen=True)
class Rejection:
    """A candidate excluded at admission (diagnostic only)."""

    file_name: str
    reason: str
    message: str


# =============================================================================
# Wire Payloads
# =============================================================================


class PresignRequest(BaseModel):
    """Body of the session negotiation request."""

    name: str
    size: int
    mime: str
    parent_id: Optional[str] = Field(None, alias="parentId")


class PresignResponse(BaseModel):
    """Upload session issued by the backend."""

    upload_session_id: str = Field(..., alias="uploadSessionId", min_length=1)
    key: str = Field(..., min_length=1)
    upload_type: Optional[str] = Field(None, alias="uploadType")

    def to_session(self) -> UploadSession:
        return UploadSession(session_id=self.upload_session_id, storage_key=self.key)


class ConfirmRequest(BaseModel):
    """Body of the confirm request."""

    upload_session_id: str = Field(..., alias="uploadSessionId")
    key: str
    size: int
    mime: str
    name: str
    parent_id: Optional[str] = Field(None, alias="parentId")


class ConfirmResponse(BaseModel):
    """Durable file record returned by confirm."""

    file_id: str = Field(..., alias="fileId", min_length=1)
    file_url: Optional[str] = Field(None, alias="fileUrl")

    def to_confirmed(self) -> ConfirmedUpload:
        return ConfirmedUpload(file_id=self.file_id, file_url=self.file_url)


class DownloadUrlResponse(BaseModel):
    """Signed, time-limited retrieval URL."""

    download_url: str = Field(..., alias="downloadUrl", min_length=1)


class StoredObject(BaseModel):
    """Object metadata returned by the fallback blob store."""

    name: str
    bucket: Optional[str] = None
    size: Optional[int] = None
    content_type: Optional[str] = Field(None, alias="contentType")
    download_tokens: Optional[str] = Field(None, alias="downloadTokens")

    @property
    def first_token(self) -> Optional[str]:
        """The store may return several comma-separated tokens."""
        if not self.download_tokens:
            return None
        return self.download_tokens.split(",")[0].strip() or None
