"""Service layer for media uploads.

Provides service classes that encapsulate the backend's upload API.
"""

from __future__ import annotations

from .admission import AdmissionResult, Batch, FileAdmissionFilter
from .base import BaseService
from .downloads import DownloadUrlResolver
from .sessions import Confirmer, SessionNegotiator
from .uploads import UploadHooks, UploadOrchestrator

__all__ = [
    "BaseService",
    "Batch",
    "AdmissionResult",
    "FileAdmissionFilter",
    "SessionNegotiator",
    "Confirmer",
    "DownloadUrlResolver",
    "UploadHooks",
    "UploadOrchestrator",
]
