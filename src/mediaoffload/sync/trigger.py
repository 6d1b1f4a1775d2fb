"""Scheduler for periodic automatic sync.

This module provides:
- AutoSyncTrigger: runs one full-mode page per interval in the background
- parse_interval: resolves named intervals to seconds
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from mediaoffload.core.types import SyncMode

if TYPE_CHECKING:
    from mediaoffload.client.api import RemoteStoreClient
    from mediaoffload.core.config import SyncConfig
    from mediaoffload.sync.batch import BatchOrchestrator
    from mediaoffload.sync.types import BatchResult

logger = logging.getLogger(__name__)

NAMED_INTERVALS = {
    "every_5_minutes": 300,
    "every_15_minutes": 900,
    "every_30_minutes": 1800,
    "hourly": 3600,
    "twicedaily": 43200,
    "daily": 86400,
}

JOB_ID = "auto_sync"


def parse_interval(value: str | int) -> int:
    """Resolve an interval name or number of seconds.

    Args:
        value: A name from NAMED_INTERVALS, or seconds as int or digit string.

    Returns:
        Interval in seconds.

    Raises:
        ValueError: If the value is unknown or not positive.
    """
    if isinstance(value, int):
        seconds = value
    elif value in NAMED_INTERVALS:
        seconds = NAMED_INTERVALS[value]
    elif value.isdigit():
        seconds = int(value)
    else:
        names = ", ".join(sorted(NAMED_INTERVALS))
        raise ValueError(f"Unknown interval {value!r} (expected seconds or one of: {names})")
    if seconds <= 0:
        raise ValueError(f"Interval must be positive, got {seconds}")
    return seconds


class AutoSyncTrigger:
    """Runs one page of full-mode sync per interval.

    Holds no state besides the configuration it was built with; changing
    the interval means building a new trigger.
    """

    def __init__(
        self,
        client: RemoteStoreClient,
        orchestrator: BatchOrchestrator,
        config: SyncConfig,
    ) -> None:
        """Initialize the trigger.

        Args:
            client: Remote store client (checked for configuration).
            orchestrator: Batch orchestrator running the page.
            config: Interval, page size and inter-asset delay.
        """
        self._client = client
        self._orchestrator = orchestrator
        self._interval = config.auto_sync_interval
        self._batch_size = config.auto_sync_batch_size
        self._asset_delay = config.auto_sync_asset_delay
        self._scheduler: BackgroundScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def run_now(self) -> BatchResult | None:
        """Run one page immediately.

        Returns:
            The page result, or None when the remote store is not configured.
        """
        if not self._client.is_configured():
            logger.error("Auto sync: remote store not configured")
            return None

        logger.info("Starting auto sync process")
        result = self._orchestrator.run_batch(
            SyncMode.FULL,
            regenerate_metadata=False,
            batch_size=self._batch_size,
            offset=0,
            asset_delay=self._asset_delay,
        )
        if result.processed_count == 0:
            logger.info("Auto sync: No unsynced assets found")
        logger.info("Auto sync process completed")
        return result

    def _sync_job(self) -> None:
        """Job function for the scheduled sync."""
        try:
            self.run_now()
        except Exception:
            logger.exception("Error during scheduled auto sync")

    def start(self) -> None:
        """Start the scheduler."""
        if self._scheduler is not None:
            return  # Already running

        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self._sync_job,
            trigger=IntervalTrigger(seconds=self._interval),
            id=JOB_ID,
            name="Automatic media sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Auto sync scheduled every {self._interval}s (batch size {self._batch_size})")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Auto sync scheduler stopped")
