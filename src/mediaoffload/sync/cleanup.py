"""Remote cleanup when an asset is deleted from the host system."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mediaoffload.client.api import APIError
from mediaoffload.sync.types import CleanupResult

if TYPE_CHECKING:
    from mediaoffload.client.api import RemoteStoreClient
    from mediaoffload.store.records import SyncRecordStore

logger = logging.getLogger(__name__)


def delete_remote_copies(
    asset_id: int,
    client: RemoteStoreClient,
    records: SyncRecordStore,
) -> CleanupResult:
    """Delete every remote copy of an asset, then clear its sync record.

    Deletes are best-effort: failures are logged and reported, and the
    record is cleared anyway because the owning asset is going away.

    Args:
        asset_id: Asset being deleted.
        client: Remote store client.
        records: Sync record store.

    Returns:
        CleanupResult listing deleted and failed remote ids.
    """
    record = records.load(asset_id)
    result = CleanupResult(asset_id=asset_id)

    for size, remote_id in record.remote_ids().items():
        try:
            client.delete(remote_id)
        except APIError as e:
            logger.error(f"Delete failed for asset {asset_id} ({size}, {remote_id}): {e}")
            result.failed.append(remote_id)
        else:
            logger.info(f"Deleted remote copy {remote_id} ({size}) of asset {asset_id}")
            result.deleted.append(remote_id)

    records.clear(asset_id)
    return result
