# File: houselook/services/saved_service.py
# Saved houses: a per-user set of listings that expires 24h after saving
# Dependencies: houselook.db.store

import logging
from typing import Any, Callable, Dict, List, Optional

from houselook.core.config import settings
from houselook.db import collections
from houselook.db.records import to_list_item
from houselook.db.store import RecordStore, read_collection
from houselook.utils.normalize import now_millis

logger = logging.getLogger(__name__)

HOUR_MS = 60 * 60 * 1000


class SavedHouses:
    """
    Pull-based TTL cache over users/{uid}/saved and users/{uid}/timesaved.

    Expiry is enforced on read: `list_valid` unsaves anything past the TTL
    and anything whose save time is missing (fail closed). Nothing sweeps
    entries that are never read again.
    """

    def __init__(
        self,
        store: RecordStore,
        ttl_ms: Optional[int] = None,
        clock: Callable[[], int] = now_millis,
    ):
        self.store = store
        self.ttl_ms = ttl_ms if ttl_ms is not None else settings.SAVED_TTL_HOURS * HOUR_MS
        self.clock = clock

    def save(self, user_id: str, item_id: str) -> int:
        """Mark an item saved; both keys land in a single multi-path update."""
        saved_at = self.clock()
        self.store.update(collections.user_path(user_id), {
            f"saved/{item_id}": True,
            f"timesaved/{item_id}": saved_at,
        })
        logger.info(f"User {user_id} saved {item_id}")
        return saved_at

    def unsave(self, user_id: str, item_id: str) -> None:
        self.store.update(collections.user_path(user_id), {
            f"saved/{item_id}": None,
            f"timesaved/{item_id}": None,
        })

    def is_valid(self, saved_flag: Any, saved_at: Any, now: int) -> bool:
        if not saved_flag:
            return False
        if isinstance(saved_at, bool) or not isinstance(saved_at, (int, float)):
            return False
        return now - saved_at < self.ttl_ms

    def list_valid(self, user_id: str) -> List[str]:
        """
        Ids of the user's unexpired saved items, in stored order.

        Expired or half-written entries are removed from the store as a side
        effect of this read.
        """
        saved = self.store.get(collections.saved_path(user_id))
        if not isinstance(saved, dict) or not saved:
            return []
        timesaved = self.store.get(collections.timesaved_path(user_id))
        if not isinstance(timesaved, dict):
            timesaved = {}

        now = self.clock()
        valid = []
        for item_id, flag in saved.items():
            if self.is_valid(flag, timesaved.get(item_id), now):
                valid.append(item_id)
            else:
                logger.info(f"Evicting expired saved item {item_id} for user {user_id}")
                self.unsave(user_id, item_id)
        return valid

    def list_saved_properties(self, user_id: str) -> List[Dict[str, Any]]:
        """Listing cards for the valid saved ids, with expiresAt; ids whose listing is gone are skipped."""
        expires = self.expires_at(user_id)
        if not expires:
            return []
        properties = read_collection(self.store, collections.PROPERTIES)
        return [
            dict(to_list_item(item_id, properties[item_id]), expiresAt=expires_at)
            for item_id, expires_at in expires.items()
            if item_id in properties
        ]

    def is_saved(self, user_id: str, item_id: str) -> bool:
        return item_id in self.list_valid(user_id)

    def expires_at(self, user_id: str) -> Dict[str, int]:
        """Expiry time (epoch millis) of each valid saved item."""
        timesaved = self.store.get(collections.timesaved_path(user_id))
        if not isinstance(timesaved, dict):
            timesaved = {}
        return {
            item_id: int(timesaved[item_id]) + self.ttl_ms
            for item_id in self.list_valid(user_id)
            if item_id in timesaved
        }
