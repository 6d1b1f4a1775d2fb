"""Paged batch synchronization.

This module provides:
- BatchOrchestrator: runs the planner and executor over one page of assets,
  and drives consecutive pages until exhaustion or cancellation

Architecture:
    run_batch processes exactly one page and returns; the caller decides
    whether to request the next one from BatchResult.has_more and
    BatchResult.next_offset. run_until_exhausted is that caller for the CLI.
    Cancellation is checked between pages only: an asset already being
    processed always finishes, and every upload it confirmed is on record.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from mediaoffload.client.api import NotConfiguredError
from mediaoffload.core.types import OutcomeKind
from mediaoffload.sync.executor import CONFIGURATION_ERRORS
from mediaoffload.sync.types import BatchResult, BatchSummary, PageCallback

if TYPE_CHECKING:
    from mediaoffload.client.api import RemoteStoreClient
    from mediaoffload.core.config import SyncConfig
    from mediaoffload.core.types import SyncMode
    from mediaoffload.sync.executor import SyncExecutor
    from mediaoffload.sync.planner import SyncPlanner

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Runs sync passes page by page."""

    def __init__(
        self,
        client: RemoteStoreClient,
        planner: SyncPlanner,
        executor: SyncExecutor,
        config: SyncConfig,
        sleep: Callable[[float], None] = time.sleep,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: Remote store client (checked for configuration).
            planner: Candidate selection.
            executor: Per-asset execution.
            config: Page size and delays.
            sleep: Sleep function used between assets.
            log: Logger to report to (defaults to this module's logger).
        """
        self._client = client
        self._planner = planner
        self._executor = executor
        self._config = config
        self._sleep = sleep
        self._log = log or logger

    def run_batch(
        self,
        mode: SyncMode,
        regenerate_metadata: bool = False,
        batch_size: int | None = None,
        offset: int = 0,
        asset_delay: float | None = None,
    ) -> BatchResult:
        """Process one page of candidates.

        Per-asset errors are collected and the page continues. A
        configuration error stops the page early (see BatchResult.aborted).

        Args:
            mode: Sync mode.
            regenerate_metadata: Refresh derivatives before planning each asset.
            batch_size: Page size (defaults to the configured batch size).
            offset: Candidate offset of the page.
            asset_delay: Pause between assets (defaults to the configured one).

        Returns:
            BatchResult for the page.

        Raises:
            NotConfiguredError: If credentials are missing.
        """
        if not self._client.is_configured():
            self._log.error("Batch sync: remote store not configured")
            raise NotConfiguredError(
                "Remote store not configured. Please check the site id and API key."
            )

        size = batch_size if batch_size is not None else self._config.batch_size
        if size < 1:
            raise ValueError(f"batch_size must be positive, got {size}")
        delay = self._config.inter_asset_delay if asset_delay is None else asset_delay

        candidates = self._planner.select_candidates(mode, offset, size)
        self._log.debug(
            f"Batch sync ({mode.value}): offset={offset}, batch_size={size}, "
            f"found {len(candidates)} candidates"
        )

        result = BatchResult(mode=mode, offset=offset, batch_size=size)
        for index, asset in enumerate(candidates):
            if index and delay > 0:
                self._sleep(delay)
            try:
                outcome = self._executor.sync_one(asset, mode, regenerate_metadata)
            except CONFIGURATION_ERRORS as e:
                self._log.error(f"Batch sync stopped at asset {asset.id}: {e}")
                result.aborted = str(e)
                break
            result.outcomes.append(outcome)
            if outcome.kind is OutcomeKind.ERROR:
                self._log.warning(outcome.message)
            else:
                self._log.info(outcome.message)

        self._log.info(
            f"Batch processed: {result.processed_count} assets "
            f"({result.succeeded} synced, {result.failed} failed, {result.skipped} skipped)"
        )
        return result

    def run_until_exhausted(
        self,
        mode: SyncMode,
        regenerate_metadata: bool = False,
        batch_size: int | None = None,
        start_offset: int = 0,
        cancel_event: threading.Event | None = None,
        on_page: PageCallback | None = None,
    ) -> BatchSummary:
        """Process pages until a short page, an abort, or cancellation.

        Args:
            mode: Sync mode.
            regenerate_metadata: Refresh derivatives before planning each asset.
            batch_size: Page size (defaults to the configured batch size).
            start_offset: Offset of the first page (resume cursor).
            cancel_event: Set to stop before the next page.
            on_page: Called with each page result.

        Returns:
            BatchSummary; its next_offset resumes an interrupted run.
        """
        summary = BatchSummary(mode=mode, next_offset=start_offset)
        offset = start_offset

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._log.info("Sync stopped by user")
                summary.cancelled = True
                break

            result = self.run_batch(
                mode,
                regenerate_metadata=regenerate_metadata,
                batch_size=batch_size,
                offset=offset,
            )
            summary.add(result)
            if on_page is not None:
                on_page(result)

            if not result.has_more:
                break
            offset = result.next_offset

            delay = self._config.page_delay
            if cancel_event is not None:
                if cancel_event.wait(delay):
                    self._log.info("Sync stopped by user")
                    summary.cancelled = True
                    break
            elif delay > 0:
                self._sleep(delay)

        self._log.info(
            f"Sync finished: {summary.processed} processed over {summary.pages} pages "
            f"({summary.succeeded} synced, {summary.failed} failed)"
        )
        return summary
