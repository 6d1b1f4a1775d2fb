"""Tests for paged batch sync."""

import threading
from unittest.mock import patch

import pytest

from mediaoffload.client.api import AuthenticationError, NotConfiguredError
from mediaoffload.core.config import SyncConfig
from mediaoffload.core.types import OutcomeKind, SyncMode
from mediaoffload.sync.batch import BatchOrchestrator
from mediaoffload.sync.types import BatchResult, Outcome


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_orchestrator(remote, planner, make_executor, sleeps):  # type: ignore[no-untyped-def]
    """Factory building an orchestrator that records its sleeps."""

    def _make(executor=None, **config):  # type: ignore[no-untyped-def]
        config.setdefault("page_delay", 0.0)
        return BatchOrchestrator(
            remote,
            planner,
            executor or make_executor(),
            SyncConfig(**config),
            sleep=sleeps.append,
        )

    return _make


class TestRunBatch:
    """Tests for run_batch()."""

    def test_processes_one_page(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        for asset_id in range(1, 6):
            add_asset(asset_id, sizes=())

        result = make_orchestrator().run_batch(SyncMode.FULL, batch_size=3)

        assert [o.asset_id for o in result.outcomes] == [1, 2, 3]
        assert result.succeeded == 3
        assert result.has_more is True
        assert len(remote.uploads) == 3

    def test_short_page_has_no_more(self, add_asset, make_orchestrator) -> None:  # type: ignore[no-untyped-def]
        add_asset(1, sizes=())

        result = make_orchestrator().run_batch(SyncMode.FULL, batch_size=3)

        assert result.processed_count == 1
        assert result.has_more is False

    def test_empty_page(self, make_orchestrator) -> None:  # type: ignore[no-untyped-def]
        result = make_orchestrator().run_batch(SyncMode.FULL)

        assert result.outcomes == []
        assert result.has_more is False

    def test_default_batch_size(self, add_asset, make_orchestrator) -> None:  # type: ignore[no-untyped-def]
        for asset_id in range(1, 5):
            add_asset(asset_id, sizes=())

        result = make_orchestrator(batch_size=2).run_batch(SyncMode.FULL)

        assert result.batch_size == 2
        assert result.processed_count == 2

    def test_errors_do_not_stop_page(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        for asset_id in (1, 2, 3):
            add_asset(asset_id, sizes=())
        remote.fail_on = {"photo-2.jpg"}

        result = make_orchestrator().run_batch(SyncMode.FULL, batch_size=3)

        assert [o.kind for o in result.outcomes] == [
            OutcomeKind.SUCCESS,
            OutcomeKind.ERROR,
            OutcomeKind.SUCCESS,
        ]
        assert result.failed == 1

    def test_local_delete_error_does_not_stop_page(  # type: ignore[no-untyped-def]
        self, add_asset, make_orchestrator, make_executor, store
    ) -> None:
        """Files that cannot be removed leave both assets synced."""
        add_asset(1)
        add_asset(2)

        with patch.object(store, "delete_file", side_effect=PermissionError("read-only")):
            result = make_orchestrator(make_executor(delete_local=True)).run_batch(
                SyncMode.FULL, batch_size=10
            )

        assert [o.kind for o in result.outcomes] == [OutcomeKind.SUCCESS, OutcomeKind.SUCCESS]
        assert [o.local_deleted for o in result.outcomes] == [False, False]
        assert result.aborted is None
        assert store.get_tag(1, "remote_url") is not None
        assert store.get_tag(2, "remote_url") is not None
        assert store.get_tag(2, "local_deleted") is None

    def test_not_configured(self, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        remote.configured = False

        with pytest.raises(NotConfiguredError):
            make_orchestrator().run_batch(SyncMode.FULL)

    def test_invalid_batch_size(self, make_orchestrator) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError):
            make_orchestrator().run_batch(SyncMode.FULL, batch_size=0)

    def test_authentication_error_aborts_page(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        """A rejected key stops the page instead of failing every asset."""
        for asset_id in (1, 2, 3):
            add_asset(asset_id, sizes=())
        remote.fail_on = {"photo-2.jpg", "photo-3.jpg"}
        remote.error = AuthenticationError("API Error 401: bad key", 401)

        result = make_orchestrator().run_batch(SyncMode.FULL, batch_size=3)

        assert result.processed_count == 1
        assert result.aborted == "API Error 401: bad key"
        assert result.has_more is False

    def test_sleeps_between_assets(self, add_asset, make_orchestrator, sleeps) -> None:  # type: ignore[no-untyped-def]
        for asset_id in (1, 2, 3):
            add_asset(asset_id, sizes=())

        make_orchestrator().run_batch(SyncMode.FULL, batch_size=3, asset_delay=0.5)

        assert sleeps == [0.5, 0.5]

    def test_messages(self, add_asset, make_orchestrator) -> None:  # type: ignore[no-untyped-def]
        add_asset(1, sizes=())

        result = make_orchestrator().run_batch(SyncMode.FULL)

        assert result.messages() == [
            {
                "asset_title": "Photo 1",
                "outcome_kind": "success",
                "message": "Synced Photo 1 (1 files)",
            }
        ]


class TestNextOffset:
    """Tests for the resume cursor of a page."""

    def test_full_mode_skips_only_unsynced(self) -> None:
        """Synced assets leave the candidate set, so they are not skipped over."""
        result = BatchResult(SyncMode.FULL, offset=4, batch_size=3)
        result.outcomes = [
            Outcome(1, "a", OutcomeKind.SUCCESS, ""),
            Outcome(2, "b", OutcomeKind.ERROR, ""),
            Outcome(3, "c", OutcomeKind.SKIPPED, ""),
        ]

        assert result.next_offset == 6

    def test_incremental_mode_advances_by_page(self) -> None:
        result = BatchResult(SyncMode.INCREMENTAL, offset=4, batch_size=2)
        result.outcomes = [
            Outcome(1, "a", OutcomeKind.SUCCESS, ""),
            Outcome(2, "b", OutcomeKind.SUCCESS, ""),
        ]

        assert result.next_offset == 6


class TestRunUntilExhausted:
    """Tests for run_until_exhausted()."""

    def test_full_mode_reaches_every_asset(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        """Every unsynced asset is visited even though the set shrinks."""
        for asset_id in range(1, 8):
            add_asset(asset_id, sizes=())
        remote.fail_on = {"photo-2.jpg"}

        summary = make_orchestrator().run_until_exhausted(SyncMode.FULL, batch_size=3)

        assert summary.succeeded == 6
        assert summary.failed == 1
        assert summary.processed == 7
        assert summary.next_offset == 1
        assert summary.cancelled is False

    def test_incremental_mode(self, add_asset, make_orchestrator, records) -> None:  # type: ignore[no-untyped-def]
        for asset_id in range(1, 6):
            add_asset(asset_id, sizes=())
            records.record_upload(asset_id, "full", f"https://cdn.test/{asset_id}", "r")

        summary = make_orchestrator().run_until_exhausted(SyncMode.INCREMENTAL, batch_size=2)

        assert summary.pages == 3
        assert summary.skipped == 5
        assert summary.next_offset == 5

    def test_page_callback(self, add_asset, make_orchestrator) -> None:  # type: ignore[no-untyped-def]
        for asset_id in range(1, 4):
            add_asset(asset_id, sizes=())
        pages: list[BatchResult] = []

        make_orchestrator().run_until_exhausted(SyncMode.FULL, batch_size=2, on_page=pages.append)

        assert [p.processed_count for p in pages] == [2, 1]

    def test_page_delay(self, add_asset, make_orchestrator, sleeps) -> None:  # type: ignore[no-untyped-def]
        for asset_id in range(1, 4):
            add_asset(asset_id, sizes=())

        make_orchestrator(page_delay=2.0).run_until_exhausted(SyncMode.FULL, batch_size=2)

        assert sleeps == [2.0]

    def test_cancel_before_start(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        add_asset(1, sizes=())
        cancel = threading.Event()
        cancel.set()

        summary = make_orchestrator().run_until_exhausted(
            SyncMode.FULL, start_offset=2, cancel_event=cancel
        )

        assert summary.cancelled is True
        assert summary.pages == 0
        assert summary.next_offset == 2
        assert remote.uploads == []

    def test_cancel_between_pages(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        """Cancelling during a page stops after that page completes."""
        for asset_id in range(1, 6):
            add_asset(asset_id, sizes=())
        cancel = threading.Event()

        summary = make_orchestrator().run_until_exhausted(
            SyncMode.FULL, batch_size=2, cancel_event=cancel,
            on_page=lambda result: cancel.set(),
        )

        assert summary.cancelled is True
        assert summary.pages == 1
        assert len(remote.uploads) == 2

    def test_abort_stops_run(self, add_asset, make_orchestrator, remote) -> None:  # type: ignore[no-untyped-def]
        for asset_id in range(1, 5):
            add_asset(asset_id, sizes=())
        remote.fail_on = {"photo-1.jpg"}
        remote.error = AuthenticationError("API Error 401: bad key", 401)

        summary = make_orchestrator().run_until_exhausted(SyncMode.FULL, batch_size=2)

        assert summary.pages == 1
        assert summary.aborted == "API Error 401: bad key"
        assert summary.next_offset == 0
