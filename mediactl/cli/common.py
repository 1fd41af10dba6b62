"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click
import httpx

from mediactl.core.auth import AuthManager
from mediactl.core.config import Config, Profile
from mediactl.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    MediaCtlError,
    ProfileNotFoundError,
)
from mediactl.core.exceptions import ConnectionError as BackendConnectionError
from mediactl.core.identity import CachedIdentity
from mediactl.core.logging import setup_logging
from mediactl.core.output import OutputFormat, print_error
from mediactl.services.uploads import UploadOrchestrator

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    USER_CANCELLED = 5


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False
        self.auth_manager: AuthManager = AuthManager()
        # Injected by tests; None uses the real network
        self.transport: Optional[httpx.AsyncBaseTransport] = None
        self.storage_transport: Optional[httpx.AsyncBaseTransport] = None

    def get_profile(self) -> Profile:
        """Resolve the active profile.

        Raises:
            ConfigurationError: If no such profile is configured.
        """
        if self.config is None:
            self.config = Config.load()

        try:
            return self.config.get_profile(self.profile_name)
        except ProfileNotFoundError as e:
            raise ConfigurationError(
                f"Profile '{self.profile_name or self.config.default_profile}' not found. "
                "Run 'mediactl config init' to create one."
            ) from e

    def get_identity(self) -> CachedIdentity:
        """Identity for the active profile, read from env or the token cache."""
        return CachedIdentity(self.get_profile().url, self.auth_manager)

    def get_orchestrator(self, **kwargs: Any) -> UploadOrchestrator:
        """Build an upload orchestrator for the active profile."""
        return UploadOrchestrator.from_profile(
            self.get_profile(),
            self.get_identity(),
            transport=self.transport,
            storage_transport=self.storage_transport,
            **kwargs,
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="MEDIACTL_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output (file ids only)",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)
        ctx.config = Config.load()

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Authentication Decorators
# =============================================================================


def require_auth(f: F) -> F:
    """Ensure a token is available before running command."""

    @wraps(f)
    def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        """Fail fast when neither MEDIACTL_TOKEN nor a cached token exists."""
        try:
            profile = ctx.get_profile()
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        if ctx.auth_manager.get_token_from_env():
            return f(ctx, *args, **kwargs)
        if ctx.auth_manager.load_session(profile.url) is None:
            raise click.ClickException(
                "Not authenticated. Run 'mediactl auth login' or set MEDIACTL_TOKEN."
            )
        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exit codes."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except AuthenticationError as e:
            print_error(str(e))
            sys.exit(ExitCode.AUTH_ERROR)
        except BackendConnectionError as e:
            print_error(str(e))
            sys.exit(ExitCode.NETWORK_ERROR)
        except MediaCtlError as e:
            print_error(str(e))
            sys.exit(ExitCode.GENERAL_ERROR)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            print_error("Cancelled")
            sys.exit(ExitCode.USER_CANCELLED)

    return wrapper  # type: ignore
