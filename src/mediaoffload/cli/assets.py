"""Asset import command for the mediaoffload CLI.

Commands:
- add: Add or update an asset in the store, offloading it when auto offload is on
"""

from __future__ import annotations

import mimetypes
import sys
from pathlib import Path

import click

from mediaoffload.cli.config import get_state_db, load_config


def _parse_size(value: str) -> tuple[str, Path]:
    name, sep, path = value.partition("=")
    if not sep or not name or not path:
        raise click.BadParameter(f"expected NAME=PATH, got {value!r}", param_hint="--size")
    return name, Path(path).expanduser().resolve()


@click.command()
@click.argument("asset_id", type=int)
@click.argument(
    "primary_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--title", default="", help="Asset title.")
@click.option("--mime-type", default=None, help="MIME type (guessed from the file name).")
@click.option(
    "--size",
    "sizes",
    multiple=True,
    metavar="NAME=PATH",
    help="Derivative size file; repeat for each size. Recorded sizes are kept when omitted.",
)
def add(
    asset_id: int,
    primary_file: Path,
    title: str,
    mime_type: str | None,
    sizes: tuple[str, ...],
) -> None:
    """Add or update an asset.

    With auto offload enabled the asset is uploaded right away.
    """
    from mediaoffload.client.api import APIError
    from mediaoffload.engine import OffloadEngine
    from mediaoffload.store.attachments import Derivative

    derivatives = {name: Derivative(path) for name, path in map(_parse_size, sizes)}
    mime = mime_type or mimetypes.guess_type(primary_file.name)[0] or "application/octet-stream"

    config = load_config()
    with OffloadEngine(config, get_state_db(config)) as engine:
        try:
            asset, outcome = engine.import_asset(
                asset_id,
                primary_file.expanduser().resolve(),
                mime,
                title=title,
                derivatives=derivatives or None,
            )
        except APIError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    click.echo(f"Added asset {asset.id} ({asset.display_title}, {len(asset.derivatives)} sizes)")
    if outcome is not None:
        click.echo(outcome.message)
