"""Maintenance job removing file resources whose upload never finished."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from linkhub.core.storage import ObjectStorageGateway
from linkhub.errors import NotFoundError, ResourceError
from linkhub.services.resource_store import ResourceStore

logger = logging.getLogger(__name__)

SWEEP_BATCH_SIZE = 100


def sweep_stale_uploads(
    store: ResourceStore,
    gateway: ObjectStorageGateway,
    older_than: datetime,
) -> dict[str, int]:
    """
    Delete pending file resources created before ``older_than``.

    Returns:
        dict with counts of deleted resources and objects that could not be removed.
    """
    stats = {
        "resources_deleted": 0,
        "objects_failed": 0,
    }

    stale = store.find_stale_pending_files(older_than, limit=SWEEP_BATCH_SIZE)
    for resource in stale:
        try:
            store.delete_resource(resource.entry.id)
        except NotFoundError:
            # Deleted concurrently.
            continue
        stats["resources_deleted"] += 1

        try:
            gateway.delete_object(resource.file.file_uuid)
        except ResourceError:
            logger.warning(
                "Failed to delete object for stale file resource %s", resource.entry.id, exc_info=True
            )
            stats["objects_failed"] += 1

    if stats["resources_deleted"]:
        logger.info(
            "Swept %d stale pending upload(s), %d object deletion(s) failed",
            stats["resources_deleted"],
            stats["objects_failed"],
        )
    return stats


async def run_upload_sweeper(
    store: ResourceStore,
    gateway: ObjectStorageGateway,
    *,
    ttl: timedelta,
    interval_seconds: float,
) -> None:
    """Run :func:`sweep_stale_uploads` forever, once per ``interval_seconds``."""

    logger.info("Pending upload sweeper started (ttl=%s, interval=%ss)", ttl, interval_seconds)
    while True:
        cutoff = datetime.now(timezone.utc) - ttl
        try:
            await asyncio.to_thread(sweep_stale_uploads, store, gateway, cutoff)
        except Exception:
            logger.exception("Pending upload sweep failed")
        await asyncio.sleep(interval_seconds)
