# File: houselook/core/session.py
import logging
from typing import Any, Dict, Optional

from houselook.db import collections
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.user import AuthIdentity

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Per-request view of who is signed in.

    The store is the source of truth for the user record; the copy held here
    is a read-through cache that is dropped on every auth state change.
    """

    def __init__(
        self,
        store: RecordStore,
        identity: Optional[AuthIdentity] = None,
        redirect_after_login: Optional[str] = None,
    ):
        self.store = store
        self.identity = identity
        self.redirect_after_login = redirect_after_login
        self._user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def uid(self) -> Optional[str]:
        return self.identity.uid if self.identity else None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        if self.identity is None:
            return None
        if self._user is None:
            try:
                record = self.store.get(collections.user_path(self.identity.uid))
            except StoreUnavailable as e:
                logger.error(f"Could not load user {self.identity.uid}: {e}")
                return None
            if isinstance(record, dict):
                record.setdefault("uid", self.identity.uid)
                self._user = record
        return self._user

    @property
    def is_admin(self) -> bool:
        user = self.user
        return bool(user and user.get("isAdmin") is True)

    @property
    def points(self) -> int:
        user = self.user or {}
        points = user.get("points")
        return int(points) if isinstance(points, (int, float)) and not isinstance(points, bool) else 0

    def on_auth_state_changed(self, identity: Optional[AuthIdentity]) -> None:
        self.identity = identity
        self.invalidate()

    def invalidate(self) -> None:
        self._user = None

    def to_info(self) -> Dict[str, Any]:
        return {
            "isAuthenticated": self.is_authenticated,
            "user": self.user,
            "redirectAfterLogin": self.redirect_after_login,
        }
