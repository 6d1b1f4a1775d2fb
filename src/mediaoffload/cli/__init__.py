"""Command-line interface for mediaoffload.

This module provides the main CLI entry point and assembles all commands.

Commands:
- configure: Save credentials and sync options
- test-connection: Check credentials and cache the public domain
- status: Show sync progress counts
- add: Add or update an asset (auto offload)
- sync: Run paged batch sync
- resync: Re-sync a single asset
- delete: Remove an asset's remote copies
- migrate: Move legacy table rows into tags
- auto-sync: Run the periodic sync
"""

from __future__ import annotations

import logging

import click

from mediaoffload.cli.config import (
    get_config_dir,
    get_config_file,
    get_state_db,
    load_config,
    save_config,
)
from mediaoffload.cli.assets import add
from mediaoffload.cli.maintenance import auto_sync, delete, migrate
from mediaoffload.cli.remote import configure, status, test_connection
from mediaoffload.cli.sync import resync, sync


@click.group()
@click.version_option(package_name="mediaoffload")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """mediaoffload - Offload media files to a remote object store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        # Outcome lines are printed by the commands themselves.
        logging.getLogger("mediaoffload").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


# Remote commands
cli.add_command(configure)
cli.add_command(test_connection)
cli.add_command(status)

# Asset commands
cli.add_command(add)

# Sync commands
cli.add_command(sync)
cli.add_command(resync)

# Maintenance commands
cli.add_command(delete)
cli.add_command(migrate)
cli.add_command(auto_sync)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "get_state_db",
    "load_config",
    "save_config",
]
