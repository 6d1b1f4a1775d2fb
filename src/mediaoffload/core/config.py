"""Configuration classes for mediaoffload.

Configuration is passed by value into each component at construction.
Changing settings means building new components from a new config.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from mediaoffload.core.types import UploadMode

DEFAULT_API_BASE_URL = "https://api.strongclose.ai"
DEFAULT_CDN_BASE_URL = "https://cdn.strongclose.ai"
DEFAULT_PUBLIC_PATH_PREFIX = "wp-content/uploads"


@dataclass
class RemoteConfig:
    """Configuration for connecting to the remote object store.

    Attributes:
        site_id: Remote site identifier.
        api_key: Secret key sent as a bearer token.
        upload_root: Local storage root; uploaded paths are relative to it.
        api_base_url: Base URL of the remote API.
        cdn_base_url: Base URL public file URLs are built on.
        public_path_prefix: Path segment between the domain and the relative path.
        domain: Cached public-facing domain (resolved by test_connection).
        timeout: Timeout in seconds for lightweight requests.
        upload_timeout: Timeout in seconds for uploads.
        verify_ssl: Whether to verify SSL certificates.
    """

    site_id: str = ""
    api_key: str = ""
    upload_root: Path = field(default_factory=Path.cwd)
    api_base_url: str = DEFAULT_API_BASE_URL
    cdn_base_url: str = DEFAULT_CDN_BASE_URL
    public_path_prefix: str = DEFAULT_PUBLIC_PATH_PREFIX
    domain: str = ""
    timeout: float = 15.0
    upload_timeout: float = 60.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize URLs and paths."""
        self.api_base_url = self.api_base_url.rstrip("/")
        self.cdn_base_url = self.cdn_base_url.rstrip("/")
        self.public_path_prefix = self.public_path_prefix.strip("/")
        self.upload_root = Path(self.upload_root)

    @property
    def is_configured(self) -> bool:
        """Check that both credentials are present."""
        return bool(self.site_id) and bool(self.api_key)


@dataclass
class SyncConfig:
    """Behaviour of the synchronization engine.

    Attributes:
        delete_local_files: Remove local files once every file of a pass uploaded.
        batch_size: Default page size for batch runs.
        page_delay: Seconds to wait between pages in the page driver.
        inter_asset_delay: Seconds to wait between assets within a page.
        auto_sync_enabled: Whether the periodic trigger should run.
        auto_sync_interval: Seconds between periodic runs.
        auto_sync_batch_size: Page size for periodic runs.
        auto_sync_asset_delay: Seconds between assets for periodic runs.
        auto_offload: Upload images as soon as they are added or updated.
        upload_mode: Files sent by auto offload: "full_only" or "all_sizes".
    """

    delete_local_files: bool = False
    batch_size: int = 10
    page_delay: float = 1.0
    inter_asset_delay: float = 0.0
    auto_sync_enabled: bool = False
    auto_sync_interval: int = 3600
    auto_sync_batch_size: int = 10
    auto_sync_asset_delay: float = 0.5
    auto_offload: bool = False
    upload_mode: UploadMode = UploadMode.FULL_ONLY

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.auto_sync_batch_size < 1:
            raise ValueError(
                f"auto_sync_batch_size must be positive, got {self.auto_sync_batch_size}"
            )
        # Raises ValueError for unknown modes.
        self.upload_mode = UploadMode(self.upload_mode)


@dataclass
class OffloadConfig:
    """Complete application configuration, as stored in config.json."""

    remote: RemoteConfig = field(default_factory=RemoteConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    state_db: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OffloadConfig:
        """Create from a config file dictionary.

        Unknown keys are ignored so older config files keep loading.
        """
        remote_keys = {f.name for f in fields(RemoteConfig)}
        sync_keys = {f.name for f in fields(SyncConfig)}
        remote_data = {k: v for k, v in data.get("remote", {}).items() if k in remote_keys}
        sync_data = {k: v for k, v in data.get("sync", {}).items() if k in sync_keys}
        if "upload_root" in remote_data:
            remote_data["upload_root"] = Path(remote_data["upload_root"]).expanduser()
        state_db = data.get("state_db")
        return cls(
            remote=RemoteConfig(**remote_data),
            sync=SyncConfig(**sync_data),
            state_db=Path(state_db).expanduser() if state_db else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        remote = asdict(self.remote)
        remote["upload_root"] = str(self.remote.upload_root)
        sync = asdict(self.sync)
        sync["upload_mode"] = self.sync.upload_mode.value
        return {
            "remote": remote,
            "sync": sync,
            "state_db": str(self.state_db) if self.state_db else None,
        }
