"""Maintenance commands for the mediaoffload CLI.

Commands:
- delete: Remove an asset's remote copies and sync record
- migrate: Move legacy offload table rows into tags
- auto-sync: Run the periodic sync in the foreground
"""

from __future__ import annotations

import sqlite3
import sys
import threading
from pathlib import Path

import click

from mediaoffload.cli.config import get_state_db, load_config


@click.command()
@click.argument("asset_id", type=int)
@click.option(
    "--keep-asset",
    is_flag=True,
    help="Only clean up remote copies; keep the asset in the store.",
)
def delete(asset_id: int, keep_asset: bool) -> None:
    """Delete an asset's remote copies and forget its sync state."""
    from mediaoffload.engine import OffloadEngine
    from mediaoffload.sync.cleanup import delete_remote_copies

    config = load_config()
    with OffloadEngine(config, get_state_db(config)) as engine:
        if engine.store.get_asset(asset_id) is None:
            click.echo(f"Error: asset {asset_id} not found.", err=True)
            sys.exit(1)
        result = delete_remote_copies(asset_id, engine.client, engine.records)
        if not keep_asset:
            engine.store.remove_asset(asset_id)

    click.echo(f"Deleted {len(result.deleted)} remote file(s) of asset {asset_id}")
    if result.failed:
        click.echo(
            f"Warning: could not delete {len(result.failed)} remote file(s): "
            f"{', '.join(result.failed)}",
            err=True,
        )


@click.command()
@click.option(
    "--legacy-db",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Database holding the legacy table (default: the attachment store).",
)
@click.option("--table", default=None, help="Legacy table name.")
def migrate(legacy_db: Path | None, table: str | None) -> None:
    """Copy legacy offload table rows into per-asset sync tags."""
    from mediaoffload.engine import OffloadEngine
    from mediaoffload.store.migration import LEGACY_TABLE, MigrationError, migrate_legacy_table

    config = load_config()
    with OffloadEngine(config, get_state_db(config)) as engine:
        conn = sqlite3.connect(str(legacy_db)) if legacy_db else engine.store.connection
        try:
            migrated = migrate_legacy_table(conn, engine.store, table or LEGACY_TABLE)
        except MigrationError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        finally:
            if legacy_db:
                conn.close()

    click.echo(f"Migrated {migrated} asset(s)")


@click.command("auto-sync")
@click.option("--once", is_flag=True, help="Run a single pass and exit.")
@click.option("--force", is_flag=True, help="Run even when auto sync is disabled.")
def auto_sync(once: bool, force: bool) -> None:
    """Run the periodic sync until interrupted.

    A single pass with --once is always allowed.
    """
    from mediaoffload.engine import OffloadEngine

    config = load_config()
    if not config.remote.is_configured:
        click.echo("Error: remote store not configured. Run 'mediaoffload configure' first.", err=True)
        sys.exit(1)
    if not once and not force and not config.sync.auto_sync_enabled:
        click.echo(
            "Error: auto sync is disabled. Enable it with 'mediaoffload configure --auto-sync' "
            "or pass --force.",
            err=True,
        )
        sys.exit(1)

    with OffloadEngine(config, get_state_db(config)) as engine:
        if once:
            result = engine.trigger.run_now()
            processed = result.processed_count if result else 0
            click.echo(f"Auto sync processed {processed} asset(s)")
            return

        engine.trigger.start()
        click.echo(
            f"Auto sync running every {config.sync.auto_sync_interval}s. Press Ctrl-C to stop."
        )
        stop = threading.Event()
        try:
            while not stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            click.echo("\nStopping auto sync...")
