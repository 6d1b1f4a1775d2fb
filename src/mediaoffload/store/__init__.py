"""Store module - Host attachment store and per-asset sync records."""

from mediaoffload.store.attachments import (
    Asset,
    AssetFilter,
    AttachmentStore,
    Derivative,
    SQLiteAttachmentStore,
)
from mediaoffload.store.migration import MigrationError, migrate_legacy_table
from mediaoffload.store.records import SyncRecord, SyncRecordStore, id_tag, url_tag

__all__ = [
    # Attachments
    "Asset",
    "AssetFilter",
    "AttachmentStore",
    "Derivative",
    "SQLiteAttachmentStore",
    # Records
    "SyncRecord",
    "SyncRecordStore",
    "id_tag",
    "url_tag",
    # Migration
    "MigrationError",
    "migrate_legacy_table",
]
