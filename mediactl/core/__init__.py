"""Core modules for mediactl."""

from mediactl.core.auth import AuthManager
from mediactl.core.client import BackendClient
from mediactl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from mediactl.core.events import EventStream
from mediactl.core.exceptions import (
    AdmissionError,
    AuthenticationError,
    ConfigurationError,
    ConfirmError,
    ConnectionError,
    FallbackUploadError,
    MediaCtlError,
    NetworkError,
    OperationError,
    ProxyTransferError,
    ResolutionError,
    SessionNegotiationError,
    UploadError,
    ValidationError,
)
from mediactl.core.identity import CachedIdentity, Identity, StaticIdentity
from mediactl.core.logging import LogContext, get_audit_logger, setup_logging
from mediactl.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from mediactl.core.validation import (
    validate_max_files,
    validate_parent_id,
    validate_path_exists,
    validate_server_url,
    validate_workers,
)

__all__ = [
    # Exceptions
    "MediaCtlError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ValidationError",
    "AdmissionError",
    "OperationError",
    "UploadError",
    "SessionNegotiationError",
    "ProxyTransferError",
    "ConfirmError",
    "FallbackUploadError",
    "ResolutionError",
    # Validation
    "validate_server_url",
    "validate_parent_id",
    "validate_max_files",
    "validate_workers",
    "validate_path_exists",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client and identity
    "BackendClient",
    "Identity",
    "StaticIdentity",
    "CachedIdentity",
    # Auth
    "AuthManager",
    # Events
    "EventStream",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_audit_logger",
    "setup_logging",
    "LogContext",
]
