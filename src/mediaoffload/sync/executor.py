"""Per-asset upload execution.

This module provides:
- SyncExecutor: uploads one asset's planned files and records each success,
  for batch passes, manual re-sync and new or updated host assets
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mediaoffload.client.api import APIError, AuthenticationError, NotConfiguredError
from mediaoffload.core.types import PRIMARY_SIZE, OutcomeKind, SyncMode, UploadMode
from mediaoffload.sync.types import Outcome
from mediaoffload.thumbnails import ThumbnailError

if TYPE_CHECKING:
    from mediaoffload.client.api import RemoteStoreClient
    from mediaoffload.core.config import SyncConfig
    from mediaoffload.store.attachments import Asset, AttachmentStore
    from mediaoffload.store.records import SyncRecord, SyncRecordStore
    from mediaoffload.sync.planner import SyncPlanner
    from mediaoffload.thumbnails import Thumbnailer

logger = logging.getLogger(__name__)

# Errors that would fail identically for every asset.
CONFIGURATION_ERRORS: tuple[type[APIError], ...] = (
    NotConfiguredError,
    AuthenticationError,
)


def _shorten(url: str, limit: int = 50) -> str:
    return url if len(url) <= limit else url[: limit - 3] + "..."


class SyncExecutor:
    """Uploads the files of one asset and keeps its sync record current.

    Uploads run strictly in sequence, primary first. Every confirmed upload
    is written to the record before the next one starts.
    """

    def __init__(
        self,
        client: RemoteStoreClient,
        store: AttachmentStore,
        records: SyncRecordStore,
        planner: SyncPlanner,
        config: SyncConfig,
        thumbnailer: Thumbnailer | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            client: Remote store client.
            store: Host attachment store.
            records: Sync record store.
            planner: Planner computing the files to upload.
            config: Sync behaviour (local deletion).
            thumbnailer: Optional derivative generator for regeneration.
            log: Logger to report to (defaults to this module's logger).
        """
        self._client = client
        self._store = store
        self._records = records
        self._planner = planner
        self._config = config
        self._thumbnailer = thumbnailer
        self._log = log or logger

    def sync_one(
        self,
        asset: Asset,
        mode: SyncMode,
        regenerate_metadata: bool = False,
    ) -> Outcome:
        """Sync one asset.

        Args:
            asset: Asset to sync.
            mode: FULL uploads everything, INCREMENTAL only missing sizes.
            regenerate_metadata: Refresh derivatives before planning.

        Returns:
            Outcome of the pass.

        Raises:
            NotConfiguredError, AuthenticationError: Configuration problems that
                would fail every other asset the same way.
        """
        title = asset.display_title
        record = self._records.load(asset.id)

        primary_exists = self._store.file_exists(asset.primary_file)
        if not primary_exists and (mode is SyncMode.FULL or not record.is_synced):
            return Outcome.skipped(asset.id, title, "File not found")

        if mode is SyncMode.FULL and record.is_synced:
            return Outcome.skipped(asset.id, title, "Already synced")

        if regenerate_metadata and asset.is_image:
            asset = self._regenerate(asset, primary_exists)

        return self._execute(asset, mode, record)

    def resync(self, asset: Asset, regenerate_metadata: bool = False) -> Outcome:
        """Manual re-sync of a single asset.

        Runs a full pass for never-synced assets, incremental otherwise.
        """
        record = self._records.load(asset.id)
        mode = SyncMode.INCREMENTAL if record.is_synced else SyncMode.FULL
        return self.sync_one(asset, mode, regenerate_metadata)

    def offload_new(self, asset: Asset) -> Outcome:
        """Upload an image that was just added to or updated in the host store.

        New images get a full pass and images already synced get their
        missing sizes. With upload_mode "full_only" only the primary file
        is uploaded.

        Raises:
            NotConfiguredError, AuthenticationError: As for sync_one.
        """
        title = asset.display_title
        if not asset.is_image:
            return Outcome.skipped(asset.id, title, "Not an image")
        if not self._store.file_exists(asset.primary_file):
            return Outcome.skipped(asset.id, title, "File not found")

        record = self._records.load(asset.id)
        mode = SyncMode.INCREMENTAL if record.is_synced else SyncMode.FULL
        include_derivatives = self._config.upload_mode is UploadMode.ALL_SIZES
        return self._execute(asset, mode, record, include_derivatives)

    def _execute(
        self,
        asset: Asset,
        mode: SyncMode,
        record: SyncRecord,
        include_derivatives: bool = True,
    ) -> Outcome:
        """Plan, upload and record one asset's files."""
        title = asset.display_title
        files = self._planner.plan_files(asset, mode, record, include_derivatives)
        if not files:
            if not include_derivatives:
                return Outcome.skipped(asset.id, title, "Already synced")
            if not asset.is_image:
                return Outcome.skipped(asset.id, title, "Not an image, no sizes to check")
            return Outcome.skipped(asset.id, title, "All sizes already synced")

        domain_error = self._ensure_domain()
        if domain_error:
            return Outcome.error(asset.id, title, f"Failed {title}: {domain_error}")

        uploaded: dict[str, Path] = {}
        failed: list[str] = []
        for size, path in files.items():
            try:
                remote_id = self._client.upload(path, size)
            except CONFIGURATION_ERRORS:
                raise
            except APIError as e:
                if size == PRIMARY_SIZE:
                    self._log.error(f"Failed to upload primary file of asset {asset.id}: {e}")
                    return Outcome.error(asset.id, title, f"Failed {title} ({size}): {e}")
                self._log.warning(f"Failed to upload {size} for asset {asset.id}: {e}")
                failed.append(size)
                continue

            public_url = self._client.public_url_for(path)
            self._records.record_upload(asset.id, size, public_url, remote_id)
            uploaded[size] = path
            self._log.info(f"Uploaded {size} to {_shorten(public_url)}")

        if not uploaded:
            return Outcome.error(asset.id, title, f"Failed to sync {title}: nothing uploaded")

        if mode is SyncMode.FULL:
            message = f"Synced {title} ({len(uploaded)} files)"
        else:
            message = f"Synced {title}: {len(uploaded)} missing size(s) uploaded"
        if failed:
            message += f" (failed: {', '.join(failed)})"

        local_deleted = False
        if self._config.delete_local_files and not failed:
            local_deleted = self._delete_local(asset, uploaded)
            if local_deleted:
                message += " (local files deleted)"
            else:
                message += " (local files kept: delete failed)"

        return Outcome(
            asset_id=asset.id,
            title=title,
            kind=OutcomeKind.SUCCESS,
            message=message,
            uploaded=len(uploaded),
            failed_sizes=failed,
            local_deleted=local_deleted,
        )

    def _ensure_domain(self) -> str | None:
        """Resolve the public domain before uploading.

        Without a domain no public URL can be recorded, so an upload would
        succeed remotely but leave the asset looking unsynced.

        Returns:
            Error message, or None when the domain is known.
        """
        if self._client.domain:
            return None
        try:
            domain = self._client.test_connection()
        except CONFIGURATION_ERRORS:
            raise
        except APIError as e:
            return f"cannot resolve public domain ({e})"
        if not domain:
            return "remote store reported no public domain"
        return None

    def _regenerate(self, asset: Asset, primary_exists: bool) -> Asset:
        """Refresh derivatives; failures keep the recorded ones."""
        if self._thumbnailer is None:
            self._log.warning(
                f"Regeneration requested for asset {asset.id} but no thumbnailer is configured"
            )
            return asset
        if not primary_exists:
            self._log.debug(f"Primary file of asset {asset.id} missing, not regenerating")
            return asset

        self._log.debug(f"Regenerating derivatives for asset {asset.id}")
        try:
            derivatives = self._thumbnailer.generate(asset)
        except (ThumbnailError, OSError) as e:
            self._log.warning(f"Derivative regeneration failed for asset {asset.id}: {e}")
            return asset
        if not derivatives:
            return asset

        self._store.set_derivatives(asset.id, derivatives)
        self._log.debug(f"Regenerated {len(derivatives)} sizes for asset {asset.id}")
        return dataclasses.replace(asset, derivatives=derivatives)

    def _delete_local(self, asset: Asset, uploaded: dict[str, Path]) -> bool:
        """Remove the uploaded local files.

        Returns:
            True if every file is gone; only then is the record marked.
        """
        ok = True
        for path in uploaded.values():
            if not self._store.file_exists(path):
                continue
            try:
                self._store.delete_file(path)
            except OSError as e:
                self._log.error(f"Could not delete local file {path} of asset {asset.id}: {e}")
                ok = False
        if not ok:
            return False
        self._records.mark_local_deleted(asset.id)
        self._log.info(f"Deleted {len(uploaded)} local files of asset {asset.id}")
        return True
