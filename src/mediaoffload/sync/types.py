"""Shared types and dataclasses for sync operations.

This module provides:
- Outcome: Result of syncing one asset
- BatchResult: Result of one page of a batch run
- BatchSummary: Aggregate of a multi-page run
- CleanupResult: Result of removing an asset's remote copies
- Type aliases for callbacks
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from mediaoffload.core.types import OutcomeKind, SyncMode


@dataclass
class Outcome:
    """Result of syncing one asset.

    Attributes:
        asset_id: Asset that was processed.
        title: Display title of the asset.
        kind: success, skipped or error.
        message: Human-readable detail.
        uploaded: Number of files uploaded in this pass.
        failed_sizes: Sizes whose upload failed in this pass.
        local_deleted: Local files were removed after upload.
    """

    asset_id: int
    title: str
    kind: OutcomeKind
    message: str
    uploaded: int = 0
    failed_sizes: list[str] = field(default_factory=list)
    local_deleted: bool = False

    @classmethod
    def skipped(cls, asset_id: int, title: str, reason: str) -> Outcome:
        return cls(asset_id, title, OutcomeKind.SKIPPED, f"Skipped {title}: {reason}")

    @classmethod
    def error(cls, asset_id: int, title: str, message: str) -> Outcome:
        return cls(asset_id, title, OutcomeKind.ERROR, message)

    @property
    def is_partial(self) -> bool:
        """Some but not all files of the pass were uploaded."""
        return self.kind is OutcomeKind.SUCCESS and bool(self.failed_sizes)

    def to_log_entry(self) -> dict[str, str]:
        """Flat entry for a log stream display."""
        return {
            "asset_title": self.title,
            "outcome_kind": self.kind.value,
            "message": self.message,
        }


@dataclass
class BatchResult:
    """Result of one page of a batch run.

    Attributes:
        mode: Sync mode of the page.
        offset: Offset the page was planned at.
        batch_size: Requested page size.
        outcomes: One outcome per processed asset, in processing order.
        aborted: Reason the page stopped early, None if it completed.
    """

    mode: SyncMode
    offset: int
    batch_size: int
    outcomes: list[Outcome] = field(default_factory=list)
    aborted: str | None = None

    @property
    def processed_count(self) -> int:
        return len(self.outcomes)

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind is kind)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeKind.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(OutcomeKind.ERROR)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeKind.SKIPPED)

    @property
    def partial(self) -> int:
        return sum(1 for o in self.outcomes if o.is_partial)

    @property
    def has_more(self) -> bool:
        """A full page suggests more candidates remain."""
        return self.aborted is None and self.processed_count == self.batch_size

    @property
    def next_offset(self) -> int:
        """Offset of the next page.

        In full mode, synced assets leave the candidate set, so only the
        assets that stayed behind are skipped over.
        """
        if self.mode is SyncMode.FULL:
            return self.offset + self.processed_count - self.succeeded
        return self.offset + self.processed_count

    def messages(self) -> list[dict[str, str]]:
        """Flat log entries, one per processed asset."""
        return [o.to_log_entry() for o in self.outcomes]


@dataclass
class BatchSummary:
    """Aggregate of a multi-page run."""

    mode: SyncMode
    pages: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    partial: int = 0
    next_offset: int = 0
    cancelled: bool = False
    aborted: str | None = None
    log: list[dict[str, str]] = field(default_factory=list)

    def add(self, result: BatchResult) -> None:
        """Fold a page result into the summary."""
        self.pages += 1
        self.processed += result.processed_count
        self.succeeded += result.succeeded
        self.failed += result.failed
        self.skipped += result.skipped
        self.partial += result.partial
        self.next_offset = result.next_offset
        self.log.extend(result.messages())
        if result.aborted:
            self.aborted = result.aborted


@dataclass
class CleanupResult:
    """Result of removing an asset's remote copies."""

    asset_id: int
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class SyncTrigger(Protocol):
    """Port for anything that can run one sync pass on demand."""

    def run_now(self) -> BatchResult | None: ...


# Type alias for per-page callback in the page driver
PageCallback = Callable[[BatchResult], None]
