"""Tests for mediactl.core.exceptions module."""

from __future__ import annotations

import pytest

from mediactl.core.exceptions import (
    AdmissionError,
    AuthenticationError,
    BackendError,
    ConfigurationError,
    ConfirmError,
    ConnectionError,
    FallbackUploadError,
    InvalidURLError,
    MediaCtlError,
    NetworkError,
    NotAuthenticatedError,
    OperationError,
    ProfileNotFoundError,
    ProxyTransferError,
    ResolutionError,
    SessionNegotiationError,
    TooLargeError,
    UnsupportedTypeError,
    UploadError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Tests for exception hierarchy."""

    def test_base_error(self):
        exc = MediaCtlError("test error")
        assert str(exc) == "test error"
        assert isinstance(exc, Exception)

    def test_details_in_str(self):
        exc = MediaCtlError("boom", {"file": "a.png", "status_code": 500})
        assert str(exc) == "boom (file=a.png, status_code=500)"

    @pytest.mark.parametrize(
        "exc_type,parent",
        [
            (ProfileNotFoundError, ConfigurationError),
            (InvalidURLError, ValidationError),
            (AdmissionError, ValidationError),
            (UnsupportedTypeError, AdmissionError),
            (TooLargeError, AdmissionError),
            (NetworkError, ConnectionError),
            (BackendError, ConnectionError),
            (NotAuthenticatedError, AuthenticationError),
            (UploadError, OperationError),
            (SessionNegotiationError, UploadError),
            (ProxyTransferError, UploadError),
            (ConfirmError, UploadError),
            (FallbackUploadError, UploadError),
            (ResolutionError, OperationError),
        ],
    )
    def test_subclassing(self, exc_type: type, parent: type):
        assert issubclass(exc_type, parent)
        assert issubclass(exc_type, MediaCtlError)

    def test_resolution_error_is_not_upload_error(self):
        assert not issubclass(ResolutionError, UploadError)


class TestUploadErrors:
    """Tests for per-step upload errors."""

    @pytest.mark.parametrize(
        "exc_type,kind",
        [
            (SessionNegotiationError, "negotiate"),
            (ProxyTransferError, "transfer"),
            (ConfirmError, "confirm"),
            (FallbackUploadError, "fallback"),
        ],
    )
    def test_kind(self, exc_type: type, kind: str):
        exc = exc_type("failed", "a.png")
        assert exc.kind == kind
        assert exc.operation == kind
        assert exc.file_name == "a.png"

    def test_status_code_in_details(self):
        exc = ProxyTransferError("failed", "a.png", status_code=502)
        assert exc.details == {"operation": "transfer", "file": "a.png", "status_code": 502}

    def test_confirm_error_identifies_orphan(self):
        exc = ConfirmError("lost", "a.png", session_id="sess-1", storage_key="uploads/a.png")
        assert exc.details["session_id"] == "sess-1"
        assert exc.details["storage_key"] == "uploads/a.png"

    def test_fallback_error_keeps_primary(self):
        primary = SessionNegotiationError("down")
        exc = FallbackUploadError("also down", primary_error=primary)
        assert exc.primary_error is primary

    def test_cause_is_kept(self):
        cause = RuntimeError("socket closed")
        assert ProxyTransferError("failed", cause=cause).cause is cause


class TestOtherErrors:
    """Tests for messages of non-upload errors."""

    def test_unsupported_type_message(self):
        exc = UnsupportedTypeError("notes.txt", "text/plain", "image/")
        assert "notes.txt" in str(exc)
        assert "text/plain" in str(exc)
        assert "image/*" in str(exc)

    def test_unsupported_type_unknown_mime(self):
        assert "unknown" in str(UnsupportedTypeError("blob", "", "image/"))

    def test_too_large_message(self):
        exc = TooLargeError("big.png", 12 * 1024 * 1024, 10 * 1024 * 1024)
        assert "12.0MB" in str(exc)
        assert "10.0MB" in str(exc)

    def test_backend_error_truncates_body(self):
        exc = BackendError("https://api.example.com/x", 500, "x" * 500)
        assert exc.status_code == 500
        assert len(exc.message) < 300

    def test_resolution_error(self):
        exc = ResolutionError("file-1", status_code=404)
        assert exc.file_id == "file-1"
        assert "file-1" in str(exc)
        assert exc.details["status_code"] == 404

    def test_auth_error_mentions_url(self):
        assert "api.example.com" in str(AuthenticationError("https://api.example.com", "bad"))
