"""Core module - Shared configuration and types."""

from mediaoffload.core.config import OffloadConfig, RemoteConfig, SyncConfig
from mediaoffload.core.types import PRIMARY_SIZE, OutcomeKind, SyncMode, UploadMode

__all__ = [
    # Config
    "OffloadConfig",
    "RemoteConfig",
    "SyncConfig",
    # Types
    "PRIMARY_SIZE",
    "OutcomeKind",
    "SyncMode",
    "UploadMode",
]
