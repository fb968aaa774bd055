"""Main CLI entry point for uploadctl."""

from __future__ import annotations

import click

from uploadctl import __version__
from uploadctl.cli.config_cmd import config
from uploadctl.cli.upload import check, filters, upload

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="uploadctl")
def cli() -> None:
    """uploadctl - Queue files and upload them concurrently.

    Validates selected files against size and type rules, then uploads
    them in parallel with live per-file and overall progress.

    Get started:

      uploadctl config init             # Create config file

      uploadctl check ./photos          # Validate without uploading

      uploadctl upload ./photos -f images

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(upload)
cli.add_command(check)
cli.add_command(filters)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
