"""Candidate selection and per-asset file planning.

This module provides:
- SyncPlanner: picks the assets a pass targets and the files each still needs
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mediaoffload.core.types import PRIMARY_SIZE, SyncMode
from mediaoffload.store.attachments import AssetFilter

if TYPE_CHECKING:
    from mediaoffload.store.attachments import Asset, AttachmentStore
    from mediaoffload.store.records import SyncRecord

logger = logging.getLogger(__name__)

_MODE_FILTERS = {
    SyncMode.FULL: AssetFilter.UNSYNCED,
    SyncMode.INCREMENTAL: AssetFilter.SYNCED,
}


class SyncPlanner:
    """Decides which assets and which of their files need uploading.

    Candidates are always ordered by ascending id, so repeating a page at
    the same offset after a crash revisits the same assets.
    """

    def __init__(self, store: AttachmentStore) -> None:
        """Initialize the planner.

        Args:
            store: Host attachment store.
        """
        self._store = store

    def select_candidates(self, mode: SyncMode, offset: int, limit: int) -> list[Asset]:
        """Get one page of candidate assets.

        Args:
            mode: FULL selects never-synced assets, INCREMENTAL synced ones.
            offset: Number of candidates to skip.
            limit: Page size.

        Returns:
            Candidates ordered by ascending id.
        """
        if offset < 0 or limit < 0:
            raise ValueError(f"offset and limit must be >= 0 (got {offset}, {limit})")
        return self._store.list_assets(_MODE_FILTERS[mode], offset, limit)

    def count_candidates(self, mode: SyncMode) -> int:
        """Count all candidates of a mode."""
        return self._store.count_assets(_MODE_FILTERS[mode])

    def count_total(self) -> int:
        """Count all assets."""
        return self._store.count_assets(AssetFilter.ALL)

    def count_synced(self) -> int:
        """Count assets whose primary file is synced."""
        return self._store.count_assets(AssetFilter.SYNCED)

    def plan_files(
        self,
        asset: Asset,
        mode: SyncMode,
        record: SyncRecord,
        include_derivatives: bool = True,
    ) -> dict[str, Path]:
        """Map size name to local file for every file still to upload.

        The primary file, if included, is always first under "full".

        Args:
            asset: Asset to plan.
            mode: Sync mode.
            record: Current sync record of the asset.
            include_derivatives: False restricts the plan to the primary file.

        Returns:
            Ordered mapping; empty means nothing to do.
        """
        files: dict[str, Path] = {}

        if mode is SyncMode.FULL:
            files[PRIMARY_SIZE] = asset.primary_file
            if include_derivatives and asset.is_image:
                for size, derivative in asset.derivatives.items():
                    if size == PRIMARY_SIZE:
                        continue
                    if self._store.file_exists(derivative.path):
                        files[size] = derivative.path
            return files

        if not (include_derivatives and asset.is_image):
            return files
        for size, derivative in asset.derivatives.items():
            if size == PRIMARY_SIZE or record.has_size(size):
                continue
            if self._store.file_exists(derivative.path):
                files[size] = derivative.path
            else:
                logger.warning(
                    f"Size {size} of asset {asset.id} not found locally: {derivative.path}"
                )
        return files
