"""Sync engine for offloading media to the remote store.

Architecture:
    AutoSyncTrigger / CLI → BatchOrchestrator → SyncPlanner → SyncExecutor
        → RemoteStoreClient (network) and SyncRecordStore (tags)

Components:
- **SyncPlanner**: selects candidate assets and the files each still needs
- **SyncExecutor**: uploads one asset, writing each confirmed upload at once
- **BatchOrchestrator**: one page at a time, resumable by offset
- **AutoSyncTrigger**: periodic single-page full sync
- **delete_remote_copies**: remote cleanup when an asset is deleted
"""

from mediaoffload.sync.batch import BatchOrchestrator
from mediaoffload.sync.cleanup import delete_remote_copies
from mediaoffload.sync.executor import CONFIGURATION_ERRORS, SyncExecutor
from mediaoffload.sync.planner import SyncPlanner
from mediaoffload.sync.trigger import NAMED_INTERVALS, AutoSyncTrigger, parse_interval
from mediaoffload.sync.types import (
    BatchResult,
    BatchSummary,
    CleanupResult,
    Outcome,
    PageCallback,
    SyncTrigger,
)

__all__ = [
    # Types
    "BatchResult",
    "BatchSummary",
    "CleanupResult",
    "Outcome",
    "PageCallback",
    "SyncTrigger",
    # Components
    "AutoSyncTrigger",
    "BatchOrchestrator",
    "CONFIGURATION_ERRORS",
    "SyncExecutor",
    "SyncPlanner",
    "delete_remote_copies",
    # Scheduling
    "NAMED_INTERVALS",
    "parse_interval",
]
