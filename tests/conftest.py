"""Shared fixtures for mediaoffload tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest

from mediaoffload.client.api import APIError
from mediaoffload.core.config import SyncConfig
from mediaoffload.core.types import UploadMode
from mediaoffload.store.attachments import Asset, Derivative, SQLiteAttachmentStore
from mediaoffload.store.records import SyncRecordStore
from mediaoffload.sync.executor import SyncExecutor
from mediaoffload.sync.planner import SyncPlanner
from mediaoffload.thumbnails import Thumbnailer


class FakeRemoteStore:
    """In-memory stand-in for RemoteStoreClient.

    Uploads of files whose name is in fail_on raise `error`.
    """

    def __init__(self, domain: str = "example.test") -> None:
        self.domain = domain
        self.configured = True
        self.fail_on: set[str] = set()
        self.fail_delete: set[str] = set()
        self.error: APIError = APIError("API Error 500: boom", 500)
        self.uploads: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.connection_tests = 0
        self._next_id = 0

    def is_configured(self) -> bool:
        return self.configured

    def test_connection(self) -> str:
        self.connection_tests += 1
        return self.domain

    def upload(self, file_path: Path | str, size_name: str = "full") -> str:
        path = Path(file_path)
        if path.name in self.fail_on:
            raise self.error
        self._next_id += 1
        self.uploads.append((size_name, path.name))
        return f"media-{self._next_id}"

    def public_url_for(self, file_path: Path | str) -> str:
        return f"https://cdn.test/{self.domain}/{Path(file_path).name}"

    def delete(self, remote_id: str) -> None:
        if remote_id in self.fail_delete:
            raise APIError("API Error 500: delete refused", 500)
        self.deleted.append(remote_id)


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """Local upload root."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def store(tmp_path: Path) -> Iterator[SQLiteAttachmentStore]:
    """Create an attachment store."""
    s = SQLiteAttachmentStore(tmp_path / "media.db")
    yield s
    s.close()


@pytest.fixture
def records(store: SQLiteAttachmentStore) -> SyncRecordStore:
    return SyncRecordStore(store)


@pytest.fixture
def planner(store: SQLiteAttachmentStore) -> SyncPlanner:
    return SyncPlanner(store)


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


AddAsset = Callable[..., Asset]


@pytest.fixture
def add_asset(store: SQLiteAttachmentStore, media_dir: Path) -> AddAsset:
    """Factory adding an asset with files on disk.

    Sizes listed in `missing` are recorded as derivatives but not written.
    """

    def _add(
        asset_id: int,
        sizes: Sequence[str] = ("thumb", "medium"),
        mime_type: str = "image/jpeg",
        primary_exists: bool = True,
        missing: Sequence[str] = (),
        title: str = "",
    ) -> Asset:
        primary = media_dir / f"photo-{asset_id}.jpg"
        if primary_exists:
            primary.write_bytes(b"primary-" + str(asset_id).encode())
        derivatives = {}
        for size in sizes:
            path = media_dir / f"photo-{asset_id}-{size}.jpg"
            if size not in missing:
                path.write_bytes(f"{size}-{asset_id}".encode())
            derivatives[size] = Derivative(path, 100, 100)
        return store.add_asset(
            asset_id, primary, mime_type, title=title or f"Photo {asset_id}",
            derivatives=derivatives,
        )

    return _add


@pytest.fixture
def make_executor(
    remote: FakeRemoteStore,
    store: SQLiteAttachmentStore,
    records: SyncRecordStore,
    planner: SyncPlanner,
) -> Callable[..., SyncExecutor]:
    """Factory building an executor around the fake remote store."""

    def _make(
        delete_local: bool = False,
        thumbnailer: Thumbnailer | None = None,
        upload_mode: UploadMode = UploadMode.FULL_ONLY,
    ) -> SyncExecutor:
        return SyncExecutor(
            remote,  # type: ignore[arg-type]
            store,
            records,
            planner,
            SyncConfig(delete_local_files=delete_local, upload_mode=upload_mode),
            thumbnailer=thumbnailer,
        )

    return _make
