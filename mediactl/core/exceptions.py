"""Exception hierarchy for mediactl.

Provides typed exceptions for each failure mode of the upload pipeline.
"""

from __future__ import annotations

from typing import Any


class MediaCtlError(Exception):
    """Base exception for all mediactl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MediaCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(MediaCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


# =============================================================================
# Admission Errors
# =============================================================================


class AdmissionError(ValidationError):
    """A file candidate was refused before any network call."""

    def __init__(self, message: str, file_name: str):
        super().__init__(message, field="file", value=file_name)
        self.file_name = file_name


class UnsupportedTypeError(AdmissionError):
    """Mime type does not match the allowed prefix."""

    def __init__(self, file_name: str, mime_type: str, allowed_prefix: str):
        super().__init__(
            f"{file_name} is not an accepted type ({mime_type or 'unknown'}, "
            f"expected {allowed_prefix}*)",
            file_name,
        )
        self.mime_type = mime_type
        self.allowed_prefix = allowed_prefix


class TooLargeError(AdmissionError):
    """File exceeds the size ceiling."""

    def __init__(self, file_name: str, byte_size: int, max_size: int):
        super().__init__(
            f"{file_name} is too large ({byte_size / (1024 * 1024):.1f}MB, "
            f"limit {max_size / (1024 * 1024):.1f}MB)",
            file_name,
        )
        self.byte_size = byte_size
        self.max_size = max_size


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(MediaCtlError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS, timeouts)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class BackendError(ConnectionError):
    """Backend answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        msg = f"HTTP {status_code} from {url}"
        if body:
            msg = f"{msg}: {body[:200]}"
        super().__init__(msg, url)
        self.status_code = status_code
        self.details["status_code"] = status_code
        self.body = body


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(MediaCtlError):
    """Authentication failed."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


class NotAuthenticatedError(AuthenticationError):
    """No identity token is available."""

    def __init__(self, url: str | None = None):
        super().__init__(url, "Not authenticated - run 'mediactl auth login' or set MEDIACTL_TOKEN")


class SessionExpiredError(AuthenticationError):
    """Bearer token was rejected as expired or invalid."""

    def __init__(self, url: str | None = None):
        super().__init__(url, "Token expired or invalid - please login again")


class PermissionDeniedError(AuthenticationError):
    """Caller lacks permission for the requested operation."""

    def __init__(self, resource: str, operation: str = "access"):
        super().__init__(reason=f"Permission denied to {operation} {resource}")
        self.resource = resource
        self.operation = operation


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(MediaCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during one step of a file upload.

    ``kind`` names the failing step so per-file errors can be reported and
    reconciled without inspecting the class.
    """

    kind = "upload"

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        details: dict[str, Any] = {}
        if file_name:
            details["file"] = file_name
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(self.kind, message, details)
        self.file_name = file_name
        self.cause = cause
        self.status_code = status_code


class SessionNegotiationError(UploadError):
    """Backend did not issue an upload session."""

    kind = "negotiate"


class ProxyTransferError(UploadError):
    """Streaming the bytes through the proxy endpoint failed."""

    kind = "transfer"


class ConfirmError(UploadError):
    """Backend received the bytes but did not create a durable record.

    The uploaded bytes may be orphaned server-side; ``session_id`` and
    ``storage_key`` identify them for reconciliation.
    """

    kind = "confirm"

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        cause: BaseException | None = None,
        status_code: int | None = None,
        session_id: str | None = None,
        storage_key: str | None = None,
    ):
        super().__init__(message, file_name, cause, status_code)
        self.session_id = session_id
        self.storage_key = storage_key
        if session_id:
            self.details["session_id"] = session_id
        if storage_key:
            self.details["storage_key"] = storage_key


class FallbackUploadError(UploadError):
    """Direct upload to the fallback blob store failed."""

    kind = "fallback"

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        cause: BaseException | None = None,
        status_code: int | None = None,
        primary_error: UploadError | None = None,
    ):
        super().__init__(message, file_name, cause, status_code)
        self.primary_error = primary_error


class ResolutionError(OperationError):
    """Could not obtain a signed download URL for a file id."""

    def __init__(
        self,
        file_id: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        details: dict[str, Any] = {"file_id": file_id}
        if status_code is not None:
            details["status_code"] = status_code
        msg = f"Could not resolve download URL for {file_id}"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__("resolve", msg, details)
        self.file_id = file_id
        self.cause = cause
        self.status_code = status_code
