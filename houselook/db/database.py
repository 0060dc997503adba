# File: houselook/db/database.py
import logging
from typing import Optional

from houselook.core.config import settings
from houselook.db.store import FirebaseRecordStore, MemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)

_store: Optional[RecordStore] = None


def init_store() -> RecordStore:
    """Create the configured record store backend once per process."""
    global _store
    if _store is None:
        if settings.STORE_BACKEND == "memory":
            logger.info("Using in-memory record store")
            _store = MemoryRecordStore()
        else:
            _store = FirebaseRecordStore(
                settings.FIREBASE_DATABASE_URL,
                credentials_path=settings.FIREBASE_CREDENTIALS,
            )
    return _store


# Store dependency for FastAPI
def get_store() -> RecordStore:
    return init_store()
