# File: houselook/services/request_service.py
# Property requests left by visitors, worked through by admins

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from houselook.db import collections
from houselook.db.store import RecordStore, read_collection
from houselook.schemas.property_request import PropertyRequestCreate

logger = logging.getLogger(__name__)


class RequestService:
    def submit(self, store: RecordStore, data: PropertyRequestCreate) -> Dict[str, Any]:
        record = data.model_dump(exclude_none=True)
        record["createdAt"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        record["contacted"] = False
        request_id = store.push(collections.PROPERTY_REQUESTS, record)
        store.update(collections.property_request_path(request_id), {"id": request_id})
        logger.info(f"Property request {request_id} submitted by {data.name}")
        return dict(record, id=request_id)

    def list_requests(self, store: RecordStore) -> List[Dict[str, Any]]:
        """Newest first."""
        requests = read_collection(store, collections.PROPERTY_REQUESTS)
        items = [dict(r, id=r.get("id") or key) for key, r in requests.items()]
        items.sort(key=lambda r: str(r.get("createdAt") or ""), reverse=True)
        return items

    def mark_contacted(self, store: RecordStore, request_id: str) -> Optional[Dict[str, Any]]:
        path = collections.property_request_path(request_id)
        record = store.get(path)
        if not isinstance(record, dict):
            return None
        # Full record rewrite with the flag set
        record = dict(record, id=request_id, contacted=True)
        store.set(path, record)
        logger.info(f"Property request {request_id} marked contacted")
        return record


# Create singleton instance
request_service = RequestService()
