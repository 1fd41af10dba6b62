"""Config commands for mediactl."""

from __future__ import annotations

from typing import Optional

import click

from mediactl.core.config import CONFIG_FILE, Config
from mediactl.core.exceptions import MediaCtlError
from mediactl.core.output import (
    OutputFormat,
    print_error,
    print_key_value,
    print_output,
    print_success,
)
from mediactl.core.validation import validate_max_files, validate_server_url


@click.group()
def config() -> None:
    """Manage mediactl configuration."""
    pass


def _validated(url: str, storage_url: Optional[str]) -> tuple[str, Optional[str]]:
    try:
        url = validate_server_url(url)
        if storage_url:
            storage_url = validate_server_url(storage_url)
    except MediaCtlError as e:
        print_error(str(e))
        raise SystemExit(1) from e
    return url, storage_url


@config.command("init")
@click.option("--url", prompt="Backend URL", help="Upload backend URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--storage-url", default=None, help="Fallback blob store URL")
@click.option("--storage-bucket", default=None, help="Fallback blob store bucket")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(
    url: str,
    profile: str,
    storage_url: Optional[str],
    storage_bucket: Optional[str],
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        mediactl config init --url https://api.example.com
    """
    url, storage_url = _validated(url, storage_url)

    if CONFIG_FILE.exists():
        cfg = Config.load()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(profile, url, storage_url=storage_url, storage_bucket=storage_bucket)
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile
    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    fallback = None
    if storage_url and storage_bucket:
        fallback = f"{storage_url}/{storage_bucket}"
    print_key_value({"profile": profile, "url": url, "fallback": fallback})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    try:
        cfg = Config.load()
    except MediaCtlError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    if not cfg.profiles:
        print_error("No configuration found. Run 'mediactl config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "storage_url": profile.storage_url,
                "storage_bucket": profile.storage_bucket,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "max_files": profile.max_files,
                "max_file_size": f"{profile.max_file_size / (1024 * 1024):.1f}MB",
                "allowed_mime_prefix": profile.allowed_mime_prefix,
            }
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        mediactl config use-context staging
    """
    cfg = Config.load()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("add-profile")
@click.argument("name")
@click.option("--url", required=True, help="Upload backend URL")
@click.option("--storage-url", default=None, help="Fallback blob store URL")
@click.option("--storage-bucket", default=None, help="Fallback blob store bucket")
@click.option("--timeout", type=int, default=30, help="Request timeout in seconds")
@click.option("--max-files", type=int, default=4, help="Files per batch")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    storage_url: Optional[str],
    storage_bucket: Optional[str],
    timeout: int,
    max_files: int,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        mediactl config add-profile staging --url https://api.staging.example.com
    """
    url, storage_url = _validated(url, storage_url)
    try:
        max_files = validate_max_files(max_files)
    except MediaCtlError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    cfg = Config.load()
    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name,
        url,
        storage_url=storage_url,
        storage_bucket=storage_bucket,
        timeout=timeout,
        max_files=max_files,
        verify_ssl=not no_verify_ssl,
    )
    cfg.save()

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        mediactl config remove-profile staging
    """
    cfg = Config.load()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save()

    print_success(f"Profile '{name}' removed")
