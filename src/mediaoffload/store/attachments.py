"""Attachment store: the host system's assets and their key-value tags.

This module provides:
- Asset, Derivative: one media object and its resized variants
- AssetFilter: which assets a listing returns
- AttachmentStore: the interface the sync engine needs from the host
- SQLiteAttachmentStore: SQLite-based implementation

Architecture:
    The sync engine only ever talks to the AttachmentStore protocol.
    Sync state lives in per-asset tags (see mediaoffload.store.records),
    so "synced" and "unsynced" listings are tag joins, ordered by id.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Tag holding the primary file's remote URL; its presence means "synced".
PRIMARY_URL_TAG = "remote_url"


@dataclass(frozen=True)
class Derivative:
    """A named resized variant of an image asset."""

    path: Path
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class Asset:
    """One media object in the host system.

    Attributes:
        id: Stable local identifier.
        title: Human-readable title (may be empty).
        primary_file: Local path of the primary file (may no longer exist).
        mime_type: MIME type; only image types get derivatives.
        derivatives: Size name to derivative file, as recorded by the thumbnailer.
    """

    id: int
    title: str
    primary_file: Path
    mime_type: str = "application/octet-stream"
    derivatives: dict[str, Derivative] = field(default_factory=dict)

    @property
    def is_image(self) -> bool:
        """Check if derivative sizes apply to this asset."""
        return self.mime_type.startswith("image/")

    @property
    def display_title(self) -> str:
        """Title for log messages, falling back to the file name."""
        return self.title or self.primary_file.name


class AssetFilter(Enum):
    """Selection used by list_assets/count_assets."""

    ALL = "all"
    UNSYNCED = "unsynced"  # no primary remote URL
    SYNCED = "synced"  # primary remote URL present


class AttachmentStore(Protocol):
    """What the sync engine needs from the host system's persistence layer."""

    def get_asset(self, asset_id: int) -> Asset | None: ...

    def list_assets(
        self, asset_filter: AssetFilter, offset: int, limit: int
    ) -> list[Asset]: ...

    def count_assets(self, asset_filter: AssetFilter) -> int: ...

    def get_tag(self, asset_id: int, key: str) -> str | None: ...

    def set_tag(self, asset_id: int, key: str, value: str) -> None: ...

    def get_tags(self, asset_id: int) -> dict[str, str]: ...

    def delete_tags(self, asset_id: int, keys: list[str]) -> None: ...

    def set_derivatives(
        self, asset_id: int, derivatives: dict[str, Derivative]
    ) -> None: ...

    def file_exists(self, path: Path) -> bool: ...

    def delete_file(self, path: Path) -> None: ...


class SQLiteAttachmentStore:
    """SQLite-based attachment store.

    Thread-safe: all access goes through one connection guarded by a lock,
    so the scheduler thread and the CLI can share an instance.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store database.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()

        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._conn.row_factory = sqlite3.Row

        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS assets (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL DEFAULT '',
                primary_file TEXT NOT NULL,
                mime_type TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS asset_derivatives (
                asset_id INTEGER NOT NULL REFERENCES assets(id) ON DELETE CASCADE,
                size TEXT NOT NULL,
                path TEXT NOT NULL,
                width INTEGER NOT NULL DEFAULT 0,
                height INTEGER NOT NULL DEFAULT 0,
                PRIMARY KEY (asset_id, size)
            );

            CREATE TABLE IF NOT EXISTS asset_tags (
                asset_id INTEGER NOT NULL REFERENCES assets(id) ON DELETE CASCADE,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                PRIMARY KEY (asset_id, key)
            );
        """)

    @property
    def connection(self) -> sqlite3.Connection:
        """Underlying connection (used by the legacy migration)."""
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # === Assets ===

    def add_asset(
        self,
        asset_id: int,
        primary_file: Path,
        mime_type: str,
        title: str = "",
        derivatives: dict[str, Derivative] | None = None,
    ) -> Asset:
        """Insert or replace an asset imported from the host system."""
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO assets (id, title, primary_file, mime_type)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    primary_file = excluded.primary_file,
                    mime_type = excluded.mime_type
                """,
                (asset_id, title, str(primary_file), mime_type),
            )
            if derivatives is not None:
                self.set_derivatives(asset_id, derivatives)
            return Asset(
                id=asset_id,
                title=title,
                primary_file=Path(primary_file),
                mime_type=mime_type,
                derivatives=self._load_derivatives(asset_id),
            )

    def remove_asset(self, asset_id: int) -> None:
        """Remove an asset with its derivatives and tags."""
        with self._lock:
            self._conn.execute("DELETE FROM assets WHERE id = ?", (asset_id,))

    def _load_derivatives(self, asset_id: int) -> dict[str, Derivative]:
        cursor = self._conn.execute(
            "SELECT size, path, width, height FROM asset_derivatives "
            "WHERE asset_id = ? ORDER BY rowid",
            (asset_id,),
        )
        return {
            row["size"]: Derivative(Path(row["path"]), row["width"], row["height"])
            for row in cursor.fetchall()
        }

    def _asset_from_row(self, row: sqlite3.Row) -> Asset:
        return Asset(
            id=row["id"],
            title=row["title"],
            primary_file=Path(row["primary_file"]),
            mime_type=row["mime_type"],
            derivatives=self._load_derivatives(row["id"]),
        )

    def get_asset(self, asset_id: int) -> Asset | None:
        """Get an asset by id.

        Returns:
            Asset if found, None otherwise.
        """
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM assets WHERE id = ?", (asset_id,)
            ).fetchone()
            if row is None:
                return None
            return self._asset_from_row(row)

    @staticmethod
    def _filter_clause(asset_filter: AssetFilter) -> str:
        if asset_filter is AssetFilter.UNSYNCED:
            return (
                "LEFT JOIN asset_tags t ON t.asset_id = a.id AND t.key = ? "
                "WHERE (t.value IS NULL OR t.value = '')"
            )
        if asset_filter is AssetFilter.SYNCED:
            return (
                "JOIN asset_tags t ON t.asset_id = a.id AND t.key = ? "
                "WHERE t.value != ''"
            )
        return ""

    def list_assets(
        self, asset_filter: AssetFilter, offset: int, limit: int
    ) -> list[Asset]:
        """List assets matching a filter, ordered by ascending id.

        Args:
            asset_filter: Which assets to return.
            offset: Number of matching assets to skip.
            limit: Maximum number of assets to return.
        """
        clause = self._filter_clause(asset_filter)
        params: list[object] = [PRIMARY_URL_TAG] if clause else []
        params.extend([limit, offset])
        with self._lock:
            rows = self._conn.execute(
                f"SELECT a.* FROM assets a {clause} ORDER BY a.id ASC LIMIT ? OFFSET ?",
                params,
            ).fetchall()
            return [self._asset_from_row(row) for row in rows]

    def count_assets(self, asset_filter: AssetFilter) -> int:
        """Count assets matching a filter."""
        clause = self._filter_clause(asset_filter)
        params = [PRIMARY_URL_TAG] if clause else []
        with self._lock:
            row = self._conn.execute(
                f"SELECT COUNT(*) AS n FROM assets a {clause}", params
            ).fetchone()
        return int(row["n"])

    def set_derivatives(self, asset_id: int, derivatives: dict[str, Derivative]) -> None:
        """Replace the recorded derivatives of an asset."""
        with self._lock:
            self._conn.execute("BEGIN")
            try:
                self._conn.execute(
                    "DELETE FROM asset_derivatives WHERE asset_id = ?", (asset_id,)
                )
                self._conn.executemany(
                    "INSERT INTO asset_derivatives (asset_id, size, path, width, height) "
                    "VALUES (?, ?, ?, ?, ?)",
                    [
                        (asset_id, size, str(d.path), d.width, d.height)
                        for size, d in derivatives.items()
                    ],
                )
            except sqlite3.Error:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")

    # === Tags ===

    def get_tag(self, asset_id: int, key: str) -> str | None:
        """Get a tag value."""
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM asset_tags WHERE asset_id = ? AND key = ?",
                (asset_id, key),
            ).fetchone()
        return row["value"] if row else None

    def set_tag(self, asset_id: int, key: str, value: str) -> None:
        """Set a tag value (upsert)."""
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO asset_tags (asset_id, key, value) VALUES (?, ?, ?)",
                (asset_id, key, value),
            )

    def get_tags(self, asset_id: int) -> dict[str, str]:
        """Get all tags of an asset."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT key, value FROM asset_tags WHERE asset_id = ?", (asset_id,)
            ).fetchall()
        return {row["key"]: row["value"] for row in rows}

    def delete_tags(self, asset_id: int, keys: list[str]) -> None:
        """Delete the given tags of an asset."""
        with self._lock:
            self._conn.executemany(
                "DELETE FROM asset_tags WHERE asset_id = ? AND key = ?",
                [(asset_id, key) for key in keys],
            )

    # === Local files ===

    def file_exists(self, path: Path) -> bool:
        """Check if a local file exists."""
        return Path(path).is_file()

    def delete_file(self, path: Path) -> None:
        """Delete a local file; a missing file is not an error."""
        Path(path).unlink(missing_ok=True)
        logger.debug(f"Deleted local file {path}")
