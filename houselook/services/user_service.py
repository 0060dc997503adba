# File: houselook/services/user_service.py
# User mirror under users/{uid}: creation on first sight, points, activity

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from houselook.core.config import settings
from houselook.db import collections
from houselook.db.store import RecordStore, read_collection
from houselook.schemas.user import AuthIdentity
from houselook.utils.normalize import now_millis, to_number

logger = logging.getLogger(__name__)


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class UserService:
    def get_user(self, store: RecordStore, uid: str) -> Optional[Dict[str, Any]]:
        record = store.get(collections.user_path(uid))
        if not isinstance(record, dict):
            return None
        record.setdefault("uid", uid)
        return record

    def ensure_user_record(
        self,
        store: RecordStore,
        identity: AuthIdentity,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Return the user's mirror, creating it the first time the user is seen.

        The stored record stays authoritative for points and isAdmin; only the
        email verification flag is refreshed from the auth provider.
        """
        existing = self.get_user(store, identity.uid)
        if existing is not None:
            if bool(existing.get("emailVerified")) != identity.email_verified:
                store.update(collections.user_path(identity.uid), {"emailVerified": identity.email_verified})
                existing["emailVerified"] = identity.email_verified
            return existing

        record = {
            "name": name or identity.display_name or "User",
            "email": identity.email or "",
            "uid": identity.uid,
            "points": settings.SIGNUP_POINTS,
            "createdAt": _iso_now(),
            "isAdmin": False,
            "emailVerified": identity.email_verified,
        }
        store.set(collections.user_path(identity.uid), record)
        logger.info(f"Created user record for {identity.uid}")
        return record

    def get_points(self, store: RecordStore, uid: str) -> int:
        points = store.get(f"{collections.user_path(uid)}/points")
        if points is None:
            return 0
        return int(to_number(points))

    def update_activity(self, store: RecordStore, uid: str, now_ms: Optional[int] = None) -> int:
        last_active = now_ms if now_ms is not None else now_millis()
        store.update(collections.user_path(uid), {"lastActive": last_active})
        return last_active

    def record_login(self, store: RecordStore, uid: str) -> None:
        store.update(collections.user_path(uid), {"lastLoginAt": _iso_now(), "lastActive": now_millis()})

    def get_user_transactions(self, store: RecordStore, uid: str) -> Dict[str, Any]:
        """The user's transactions plus totals over the completed ones."""
        transactions = read_collection(store, collections.TRANSACTIONS)
        mine: List[Dict[str, Any]] = [
            dict(t, id=t.get("id") or key) for key, t in transactions.items() if t.get("userId") == uid
        ]
        mine.sort(key=lambda t: to_number(t.get("timestamp")), reverse=True)
        completed = [t for t in mine if t.get("status") == "completed"]
        return {
            "transactions": mine,
            "totalSpent": sum(to_number(t.get("amount")) for t in completed),
            "totalPoints": sum(to_number(t.get("points")) for t in completed),
        }


# Create singleton instance
user_service = UserService()
