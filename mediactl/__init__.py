"""mediactl - Media upload orchestration for a content backend.

This package uploads user media (images by default) through a backend
proxy, with progress reporting and failover to a direct blob store:
- Client-side admission (type, size and batch capacity checks)
- Session negotiation, proxied transfer and confirmation
- Signed download URL resolution
- Fallback uploads when the primary path is unavailable
"""

__version__ = "0.1.0"

from mediactl.core.client import BackendClient
from mediactl.core.config import Config, Profile
from mediactl.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    MediaCtlError,
    NetworkError,
    UploadError,
    ValidationError,
)
from mediactl.services.uploads import UploadHooks, UploadOrchestrator

__all__ = [
    "__version__",
    "BackendClient",
    "Config",
    "Profile",
    "UploadOrchestrator",
    "UploadHooks",
    "MediaCtlError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "UploadError",
    "ValidationError",
]
