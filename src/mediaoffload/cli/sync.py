"""Sync commands for the mediaoffload CLI.

Commands:
- sync: Run paged batch sync until done or interrupted
- resync: Re-sync a single asset
"""

from __future__ import annotations

import signal
import sys
import threading
from dataclasses import replace
from types import FrameType

import click

from mediaoffload.cli.config import get_state_db, load_config
from mediaoffload.core.types import OutcomeKind, SyncMode

_KIND_COLORS = {
    OutcomeKind.SUCCESS: "green",
    OutcomeKind.SKIPPED: "yellow",
    OutcomeKind.ERROR: "red",
}


def echo_log_entry(entry: dict[str, str]) -> None:
    """Print one outcome line of the log stream."""
    kind = OutcomeKind(entry["outcome_kind"])
    click.echo(click.style(f"  [{kind.value}] ", fg=_KIND_COLORS[kind]) + entry["message"])


@click.command()
@click.option(
    "--mode",
    type=click.Choice([m.value for m in SyncMode]),
    default=SyncMode.FULL.value,
    show_default=True,
    help="full: never-synced assets; incremental: fill in missing sizes.",
)
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Assets per page.")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Resume from this offset.")
@click.option(
    "--regenerate-metadata",
    is_flag=True,
    help="Regenerate image sizes before uploading.",
)
@click.option(
    "--delete-local/--keep-local",
    default=None,
    help="Override the configured local file deletion.",
)
def sync(
    mode: str,
    batch_size: int | None,
    offset: int,
    regenerate_metadata: bool,
    delete_local: bool | None,
) -> None:
    """Upload media to the remote store, page by page.

    Ctrl-C stops after the current page; the printed offset resumes the run.
    """
    from mediaoffload.client.api import NotConfiguredError
    from mediaoffload.engine import OffloadEngine
    from mediaoffload.sync.types import BatchResult

    config = load_config()
    if delete_local is not None:
        config.sync = replace(config.sync, delete_local_files=delete_local)

    sync_mode = SyncMode(mode)
    cancel = threading.Event()

    def on_page(result: BatchResult) -> None:
        click.echo(
            f"Batch at offset {result.offset}: {result.processed_count} processed"
        )
        for entry in result.messages():
            echo_log_entry(entry)

    def on_interrupt(signum: int, frame: FrameType | None) -> None:
        if cancel.is_set():
            raise KeyboardInterrupt
        click.echo("\nStopping after the current page (Ctrl-C again to abort)...", err=True)
        cancel.set()

    with OffloadEngine(config, get_state_db(config)) as engine:
        pending = engine.planner.count_candidates(sync_mode)
        click.echo(f"{pending} assets to process ({sync_mode.value} mode)")

        previous = signal.signal(signal.SIGINT, on_interrupt)
        try:
            summary = engine.orchestrator.run_until_exhausted(
                sync_mode,
                regenerate_metadata=regenerate_metadata,
                batch_size=batch_size,
                start_offset=offset,
                cancel_event=cancel,
                on_page=on_page,
            )
        except NotConfiguredError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        finally:
            signal.signal(signal.SIGINT, previous)

    click.echo(
        f"\nDone: {summary.processed} processed, {summary.succeeded} synced "
        f"({summary.partial} partial), {summary.failed} failed, {summary.skipped} skipped"
    )
    if summary.aborted:
        click.echo(f"Stopped early: {summary.aborted}", err=True)
    if summary.cancelled or summary.aborted:
        click.echo(f"Resume with: mediaoffload sync --mode {mode} --offset {summary.next_offset}")
    if summary.aborted:
        sys.exit(1)


@click.command()
@click.argument("asset_id", type=int)
@click.option(
    "--regenerate-metadata",
    is_flag=True,
    help="Regenerate image sizes before uploading.",
)
def resync(asset_id: int, regenerate_metadata: bool) -> None:
    """Re-sync a single asset.

    Never-synced assets get a full upload; synced ones get their missing sizes.
    """
    from mediaoffload.client.api import APIError
    from mediaoffload.engine import OffloadEngine

    config = load_config()
    with OffloadEngine(config, get_state_db(config)) as engine:
        asset = engine.store.get_asset(asset_id)
        if asset is None:
            click.echo(f"Error: asset {asset_id} not found.", err=True)
            sys.exit(1)
        try:
            outcome = engine.executor.resync(asset, regenerate_metadata)
        except APIError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    echo_log_entry(outcome.to_log_entry())
    if outcome.kind is OutcomeKind.ERROR:
        sys.exit(1)
