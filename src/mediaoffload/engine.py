"""Wiring of the sync engine components.

This module provides:
- OffloadEngine: every component built once from one OffloadConfig

Settings changes are applied by closing the engine and building a new one.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mediaoffload.client.api import RemoteStoreClient
from mediaoffload.core.config import OffloadConfig
from mediaoffload.store.attachments import Asset, Derivative, SQLiteAttachmentStore
from mediaoffload.store.records import SyncRecordStore
from mediaoffload.sync.batch import BatchOrchestrator
from mediaoffload.sync.executor import SyncExecutor
from mediaoffload.sync.planner import SyncPlanner
from mediaoffload.sync.trigger import AutoSyncTrigger
from mediaoffload.sync.types import Outcome
from mediaoffload.thumbnails import Thumbnailer

logger = logging.getLogger(__name__)


class OffloadEngine:
    """All sync engine components for one configuration."""

    def __init__(
        self,
        config: OffloadConfig,
        db_path: Path,
        thumbnailer: Thumbnailer | None = None,
    ) -> None:
        """Build the engine.

        Args:
            config: Application configuration.
            db_path: Attachment store database.
            thumbnailer: Optional derivative generator.
        """
        self.config = config
        self.client = RemoteStoreClient(config.remote)
        self.store = SQLiteAttachmentStore(db_path)
        self.records = SyncRecordStore(self.store)
        self.planner = SyncPlanner(self.store)
        self.executor = SyncExecutor(
            self.client,
            self.store,
            self.records,
            self.planner,
            config.sync,
            thumbnailer=thumbnailer,
        )
        self.orchestrator = BatchOrchestrator(
            self.client, self.planner, self.executor, config.sync
        )
        self.trigger = AutoSyncTrigger(self.client, self.orchestrator, config.sync)
        logger.debug(f"Engine built (store: {db_path})")

    def import_asset(
        self,
        asset_id: int,
        primary_file: Path,
        mime_type: str,
        title: str = "",
        derivatives: dict[str, Derivative] | None = None,
    ) -> tuple[Asset, Outcome | None]:
        """Add or update an asset in the store and auto offload it when enabled.

        Returns:
            The stored asset, and the offload outcome (None when auto
            offload is disabled or the remote store is not configured).

        Raises:
            AuthenticationError: If the remote store rejected the credentials.
        """
        asset = self.store.add_asset(
            asset_id, primary_file, mime_type, title=title, derivatives=derivatives
        )
        if not self.config.sync.auto_offload:
            return asset, None
        if not self.client.is_configured():
            logger.error(f"Auto offload skipped for asset {asset_id}: remote store not configured")
            return asset, None

        outcome = self.executor.offload_new(asset)
        logger.info(outcome.message)
        return asset, outcome

    def close(self) -> None:
        """Stop the trigger and release connections."""
        self.trigger.stop()
        self.client.close()
        self.store.close()

    def __enter__(self) -> OffloadEngine:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
