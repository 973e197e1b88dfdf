# /app/services/cache_service.py

"""
Forced repopulation of the in-process snapshot stores, used by the privileged
reset endpoint after the upstream sync has written new data.
"""

import logging
from typing import List, Protocol

from fastapi import Request

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    name: str

    async def populate(self) -> None: ...


async def reset_all_caches(stores: List[SnapshotStore]) -> None:
    """
    Repopulates every store in order. A failure stops the reset and
    propagates; stores already repopulated keep their new snapshot.
    """
    for store in stores:
        await store.populate()
        logger.info("Cache reset: repopulated %s", store.name)


# --- DEPENDENCY PROVIDER ---
def get_snapshot_stores(request: Request) -> List[SnapshotStore]:
    return request.app.state.snapshot_stores
