"""One-time migration of the legacy offload table into per-asset tags.

Older installs tracked uploads in a separate table with one row per asset
(attachment_id, remote_url, remote_key). The sync engine only reads tags,
so the outer application runs this once at startup.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from mediaoffload.store.records import ID_TAG, URL_TAG

if TYPE_CHECKING:
    from mediaoffload.store.attachments import AttachmentStore

logger = logging.getLogger(__name__)

LEGACY_TABLE = "offload_files"
REQUIRED_COLUMNS = {"attachment_id", "remote_url", "remote_key"}


class MigrationError(Exception):
    """Legacy table exists but cannot be migrated."""


def legacy_table_exists(conn: sqlite3.Connection, table: str = LEGACY_TABLE) -> bool:
    """Check if the legacy table is present."""
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def migrate_legacy_table(
    conn: sqlite3.Connection,
    store: AttachmentStore,
    table: str = LEGACY_TABLE,
) -> int:
    """Copy legacy rows into tags of assets that are not synced yet.

    Assets that already have a remote URL tag are left untouched, so the
    migration can run on every startup.

    Args:
        conn: Connection holding the legacy table.
        store: Attachment store receiving the tags.
        table: Legacy table name.

    Returns:
        Number of assets migrated.

    Raises:
        MigrationError: If the table lacks the expected columns.
    """
    if not legacy_table_exists(conn, table):
        logger.debug(f"No legacy table {table!r}, nothing to migrate")
        return 0

    columns = {row[1] for row in conn.execute(f'PRAGMA table_info("{table}")')}
    missing = REQUIRED_COLUMNS - columns
    if missing:
        raise MigrationError(
            f"Legacy table {table!r} is missing columns: {', '.join(sorted(missing))}"
        )

    rows = conn.execute(
        f'SELECT attachment_id, remote_url, remote_key FROM "{table}" ORDER BY attachment_id'
    ).fetchall()

    migrated = 0
    for attachment_id, remote_url, remote_key in rows:
        if not remote_url:
            continue
        if store.get_asset(attachment_id) is None:
            logger.warning(f"Legacy row for unknown asset {attachment_id}, skipping")
            continue
        if store.get_tag(attachment_id, URL_TAG):
            continue
        store.set_tag(attachment_id, ID_TAG, remote_key or "")
        store.set_tag(attachment_id, URL_TAG, remote_url)
        migrated += 1
        logger.info(f"Migrated asset {attachment_id} from legacy table to tags")

    return migrated
