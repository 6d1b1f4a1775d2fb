"""Remote store commands for the mediaoffload CLI.

Commands:
- configure: Save credentials and sync options
- test-connection: Check credentials and cache the public domain
- status: Show sync progress counts
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from mediaoffload.cli.config import get_state_db, load_config, save_config


@click.command()
@click.option("--site-id", default=None, help="Remote site identifier.")
@click.option("--api-key", default=None, help="Remote API key (prompted if omitted).")
@click.option(
    "--upload-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Local media root; uploads keep paths relative to it.",
)
@click.option("--api-base-url", default=None, help="Remote API base URL.")
@click.option("--cdn-base-url", default=None, help="Public CDN base URL.")
@click.option(
    "--delete-local/--keep-local",
    default=None,
    help="Delete local files once all files of an asset uploaded.",
)
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Default page size.")
@click.option("--auto-sync/--no-auto-sync", default=None, help="Enable periodic sync.")
@click.option(
    "--auto-sync-interval",
    default=None,
    help="Periodic sync interval (seconds or hourly, daily, every_15_minutes...).",
)
@click.option(
    "--auto-offload/--no-auto-offload",
    default=None,
    help="Upload images as soon as they are added or updated.",
)
@click.option(
    "--upload-mode",
    type=click.Choice(["full_only", "all_sizes"]),
    default=None,
    help="Files uploaded by auto offload.",
)
@click.option(
    "--state-db",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Attachment store database path.",
)
def configure(
    site_id: str | None,
    api_key: str | None,
    upload_root: Path | None,
    api_base_url: str | None,
    cdn_base_url: str | None,
    delete_local: bool | None,
    batch_size: int | None,
    auto_sync: bool | None,
    auto_sync_interval: str | None,
    auto_offload: bool | None,
    upload_mode: str | None,
    state_db: Path | None,
) -> None:
    """Save remote store credentials and sync options.

    Only the options given are changed; the rest keep their saved values.
    """
    from dataclasses import replace

    from mediaoffload.core.types import UploadMode
    from mediaoffload.sync.trigger import parse_interval

    config = load_config()

    if api_key is None and not config.remote.api_key:
        api_key = click.prompt("API key", hide_input=True)

    remote_changes: dict[str, object] = {}
    if site_id is not None:
        remote_changes["site_id"] = site_id
    if api_key is not None:
        remote_changes["api_key"] = api_key
    if upload_root is not None:
        remote_changes["upload_root"] = upload_root.expanduser().resolve()
    if api_base_url is not None:
        remote_changes["api_base_url"] = api_base_url
    if cdn_base_url is not None:
        remote_changes["cdn_base_url"] = cdn_base_url
    if {"site_id", "api_key", "api_base_url"} & remote_changes.keys():
        # Domain belongs to the old site.
        remote_changes["domain"] = ""

    sync_changes: dict[str, object] = {}
    if delete_local is not None:
        sync_changes["delete_local_files"] = delete_local
    if batch_size is not None:
        sync_changes["batch_size"] = batch_size
    if auto_sync is not None:
        sync_changes["auto_sync_enabled"] = auto_sync
    if auto_sync_interval is not None:
        try:
            sync_changes["auto_sync_interval"] = parse_interval(auto_sync_interval)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    if auto_offload is not None:
        sync_changes["auto_offload"] = auto_offload
    if upload_mode is not None:
        sync_changes["upload_mode"] = UploadMode(upload_mode)

    config.remote = replace(config.remote, **remote_changes)
    config.sync = replace(config.sync, **sync_changes)
    if state_db is not None:
        config.state_db = state_db.expanduser().resolve()

    save_config(config)
    click.echo("Configuration saved.")
    if not config.remote.is_configured:
        click.echo("Warning: site id or API key still missing.", err=True)


@click.command("test-connection")
def test_connection() -> None:
    """Check credentials against the remote store.

    On success the public domain is saved for URL construction.
    """
    from mediaoffload.client.api import APIError, RemoteStoreClient

    config = load_config()
    with RemoteStoreClient(config.remote) as client:
        try:
            domain = client.test_connection()
        except APIError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if domain and domain != config.remote.domain:
        config.remote.domain = domain
        save_config(config)
    click.echo(f"Connection successful (domain: {domain or 'unknown'})")


@click.command()
def status() -> None:
    """Show how many assets are synced."""
    from mediaoffload.engine import OffloadEngine

    config = load_config()
    with OffloadEngine(config, get_state_db(config)) as engine:
        total = engine.planner.count_total()
        synced = engine.planner.count_synced()
        configured = engine.client.is_configured()

    click.echo(f"Remote store: {'configured' if configured else 'not configured'}")
    click.echo(f"Total assets:    {total}")
    click.echo(f"Synced assets:   {synced}")
    click.echo(f"Unsynced assets: {total - synced}")
    if total:
        click.echo(f"Progress:        {synced * 100 / total:.1f}%")
