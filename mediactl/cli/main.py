"""Main CLI entry point for mediactl."""

from __future__ import annotations

import click

from mediactl import __version__
from mediactl.cli.auth import auth
from mediactl.cli.config_cmd import config
from mediactl.cli.upload import resolve, upload

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="mediactl")
def cli() -> None:
    """mediactl - Upload media through a content backend.

    Files go through the backend's upload proxy with progress reporting,
    and fall back to a direct blob store when the backend is unavailable.

    Get started:

      mediactl config init       # Create config file

      mediactl auth login        # Cache a token

      mediactl upload photo.jpg  # Upload a file

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(auth)
cli.add_command(upload)
cli.add_command(resolve)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
