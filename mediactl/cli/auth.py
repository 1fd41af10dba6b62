"""Authentication commands for mediactl.

Tokens are issued by the identity provider outside mediactl; these
commands only cache them for the active profile.
"""

from __future__ import annotations

import click

from mediactl.core.auth import SESSION_EXPIRY_HOURS, AuthManager
from mediactl.core.config import Config
from mediactl.core.exceptions import ProfileNotFoundError
from mediactl.core.output import (
    print_error,
    print_json,
    print_key_value,
    print_success,
    print_warning,
)


@click.group()
def auth() -> None:
    """Manage authentication credentials."""
    pass


@auth.command("login")
@click.option("--profile", "-p", "profile_name", help="Profile to authenticate")
@click.option("--uid", help="Identity the token was issued to")
@click.option("--token", help="Bearer token (will prompt if not provided)")
@click.option(
    "--expiry-hours",
    type=float,
    default=SESSION_EXPIRY_HOURS,
    show_default=True,
    help="Hours until the cached token is discarded",
)
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table")
def auth_login(
    profile_name: str | None,
    uid: str | None,
    token: str | None,
    expiry_hours: float,
    output: str,
) -> None:
    """Cache a bearer token for a profile.

    The uid and token default to MEDIACTL_UID and MEDIACTL_TOKEN.

    Example:
        mediactl auth login --uid user-42
        mediactl auth login --profile staging --uid user-42 --token eyJ...
    """
    config = Config.load()
    auth_mgr = AuthManager()

    try:
        profile = config.get_profile(profile_name)
    except ProfileNotFoundError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    uid = uid or auth_mgr.get_uid_from_env()
    token = token or auth_mgr.get_token_from_env()

    if not uid:
        uid = click.prompt("User id")
    if not token:
        token = click.prompt("Token", hide_input=True)

    session = auth_mgr.save_session(
        token=token, uid=uid, url=profile.url, expiry_hours=expiry_hours
    )

    if output == "json":
        print_json(
            {
                "status": "authenticated",
                "uid": uid,
                "url": profile.url,
                "expires_at": session.expires_at.isoformat() if session.expires_at else None,
            }
        )
    else:
        print_success(f"Logged in as {uid}")
        click.echo(f"Token cached until {session.expires_at}")


@auth.command("logout")
def auth_logout() -> None:
    """Clear the cached token.

    Example:
        mediactl auth logout
    """
    if AuthManager().clear_session():
        print_success("Logged out")
    else:
        print_warning("No cached session found")


@auth.command("status")
@click.option("--profile", "-p", "profile_name", help="Profile to check")
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table")
def auth_status(profile_name: str | None, output: str) -> None:
    """Check authentication status.

    Example:
        mediactl auth status
    """
    config = Config.load()
    auth_mgr = AuthManager()

    try:
        profile = config.get_profile(profile_name)
    except ProfileNotFoundError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    session_info = auth_mgr.get_session_info(profile.url)
    status = {
        "url": profile.url,
        "env_uid": auth_mgr.get_uid_from_env() or "(not set)",
        "env_token": "(set)" if auth_mgr.get_token_from_env() else "(not set)",
        "session_cached": session_info is not None,
    }

    if session_info:
        status.update(
            {
                "session_uid": session_info["uid"],
                "session_created": session_info["created_at"],
                "session_expires": session_info["expires_at"],
            }
        )

    if output == "json":
        print_json(status)
    else:
        print_key_value(status, title=f"Auth Status: {profile_name or config.default_profile}")
