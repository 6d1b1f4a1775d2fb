"""Per-asset sync records stored as attachment tags.

This module provides:
- SyncRecord: what has been uploaded for an asset, and where
- SyncRecordStore: reads and writes records through an AttachmentStore

Tag layout, one set per asset:
    remote_url, remote_id               primary file
    remote_url_<size>, remote_id_<size> each uploaded derivative size
    local_deleted                       "1" once local files were removed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mediaoffload.core.types import PRIMARY_SIZE
from mediaoffload.store.attachments import PRIMARY_URL_TAG

if TYPE_CHECKING:
    from mediaoffload.store.attachments import AttachmentStore

logger = logging.getLogger(__name__)

URL_TAG = PRIMARY_URL_TAG
ID_TAG = "remote_id"
LOCAL_DELETED_TAG = "local_deleted"


def url_tag(size: str) -> str:
    """Tag key holding the remote URL of a size."""
    return URL_TAG if size == PRIMARY_SIZE else f"{URL_TAG}_{size}"


def id_tag(size: str) -> str:
    """Tag key holding the remote id of a size."""
    return ID_TAG if size == PRIMARY_SIZE else f"{ID_TAG}_{size}"


@dataclass
class SyncRecord:
    """Sync state of one asset.

    Attributes:
        asset_id: Owning asset.
        primary_remote_url: Public URL of the primary file, "" if not synced.
        primary_remote_id: Remote id of the primary file (needed to delete it).
        size_remote_urls: Public URL per uploaded derivative size.
        size_remote_ids: Remote id per uploaded derivative size.
        local_deleted: Local files were removed after upload.
    """

    asset_id: int
    primary_remote_url: str = ""
    primary_remote_id: str = ""
    size_remote_urls: dict[str, str] = field(default_factory=dict)
    size_remote_ids: dict[str, str] = field(default_factory=dict)
    local_deleted: bool = False

    @classmethod
    def from_tags(cls, asset_id: int, tags: dict[str, str]) -> SyncRecord:
        """Create a SyncRecord from an asset's tags."""
        url_prefix = f"{URL_TAG}_"
        id_prefix = f"{ID_TAG}_"
        size_urls: dict[str, str] = {}
        size_ids: dict[str, str] = {}
        for key, value in tags.items():
            if key.startswith(url_prefix) and value:
                size_urls[key[len(url_prefix):]] = value
            elif key.startswith(id_prefix) and value:
                size_ids[key[len(id_prefix):]] = value
        return cls(
            asset_id=asset_id,
            primary_remote_url=tags.get(URL_TAG, ""),
            primary_remote_id=tags.get(ID_TAG, ""),
            size_remote_urls=size_urls,
            size_remote_ids=size_ids,
            local_deleted=tags.get(LOCAL_DELETED_TAG) == "1",
        )

    @property
    def is_synced(self) -> bool:
        """Check if the primary file has been uploaded."""
        return bool(self.primary_remote_url)

    def has_size(self, size: str) -> bool:
        """Check if a size (or the primary, for "full") has a remote URL."""
        if size == PRIMARY_SIZE:
            return self.is_synced
        return bool(self.size_remote_urls.get(size))

    def url_for(self, size: str) -> str:
        """Remote URL of a size, "" if not uploaded."""
        if size == PRIMARY_SIZE:
            return self.primary_remote_url
        return self.size_remote_urls.get(size, "")

    def remote_ids(self) -> dict[str, str]:
        """Every non-empty remote id held, keyed by size name."""
        ids = {size: rid for size, rid in self.size_remote_ids.items() if rid}
        if self.primary_remote_id:
            ids = {PRIMARY_SIZE: self.primary_remote_id, **ids}
        return ids


class SyncRecordStore:
    """Reads and writes SyncRecords as tags of an AttachmentStore."""

    def __init__(self, store: AttachmentStore) -> None:
        self._store = store

    def load(self, asset_id: int) -> SyncRecord:
        """Load the record of an asset (empty if never synced)."""
        return SyncRecord.from_tags(asset_id, self._store.get_tags(asset_id))

    def record_upload(
        self, asset_id: int, size: str, remote_url: str, remote_id: str
    ) -> None:
        """Persist a confirmed upload of one size.

        The URL is written last: it is the tag that marks the size as synced.
        """
        self._store.set_tag(asset_id, id_tag(size), remote_id)
        self._store.set_tag(asset_id, url_tag(size), remote_url)

    def mark_local_deleted(self, asset_id: int) -> None:
        """Record that the asset's local files were removed."""
        self._store.set_tag(asset_id, LOCAL_DELETED_TAG, "1")

    def clear(self, asset_id: int) -> None:
        """Remove every sync tag of an asset."""
        tags = self._store.get_tags(asset_id)
        keys = [
            key
            for key in tags
            if key in (URL_TAG, ID_TAG, LOCAL_DELETED_TAG)
            or key.startswith(f"{URL_TAG}_")
            or key.startswith(f"{ID_TAG}_")
        ]
        if keys:
            self._store.delete_tags(asset_id, keys)
            logger.debug(f"Cleared {len(keys)} sync tags for asset {asset_id}")
