"""Shared types for mediaoffload."""

from __future__ import annotations

from enum import Enum

# Size name reserved for the primary file.
PRIMARY_SIZE = "full"


class SyncMode(str, Enum):
    """Which assets a sync pass targets.

    FULL picks assets that were never synced and uploads everything.
    INCREMENTAL picks assets with a synced primary and fills in missing sizes.
    """

    FULL = "full"
    INCREMENTAL = "incremental"


class OutcomeKind(str, Enum):
    """Result kind of syncing one asset."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class UploadMode(str, Enum):
    """Which files of a new or updated image are offloaded right away."""

    FULL_ONLY = "full_only"
    ALL_SIZES = "all_sizes"
