# File: houselook/db/store.py
# Record store adapter over the hosted realtime database
# Dependencies: firebase-admin, google-auth

import copy
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

import firebase_admin
from firebase_admin import credentials
from firebase_admin import db as firebase_db
from firebase_admin.exceptions import FirebaseError
from google.auth import exceptions as google_auth_exceptions

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]
Unsubscribe = Callable[[], None]

FIREBASE_APP_NAME = "houselook"


class StoreUnavailable(Exception):
    """Raised when the record store cannot be reached (network, permission, credentials)."""

    def __init__(self, path: str, reason: Any = None):
        self.path = path
        self.reason = reason
        super().__init__(f"Record store unavailable at '{path}': {reason}")


def split_path(path: str) -> List[str]:
    return [segment for segment in path.strip("/").split("/") if segment]


def join_path(*parts: str) -> str:
    segments: List[str] = []
    for part in parts:
        segments.extend(split_path(part))
    return "/".join(segments)


class RecordStore:
    """
    Uniform access to flat, schema-less collections.

    Every method may raise StoreUnavailable. Writing None to a path removes it,
    and `update` applies all of its (possibly nested) relative paths at once.
    """

    def get(self, path: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, path: str, value: Any) -> None:
        raise NotImplementedError

    def update(self, path: str, values: Dict[str, Any]) -> None:
        raise NotImplementedError

    def push(self, path: str, value: Any) -> str:
        raise NotImplementedError

    def transaction(self, path: str, update: Callable[[Any], Any]) -> Any:
        """Atomically replace the value at path with update(current); returns the new value."""
        raise NotImplementedError

    def subscribe(self, path: str, on_change: Listener) -> Unsubscribe:
        raise NotImplementedError


def firebase_app(database_url: str, credentials_path: Optional[str] = None):
    """The shared Admin SDK app, initialized on first use."""
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        if credentials_path:
            cred = credentials.Certificate(credentials_path)
        else:
            cred = credentials.ApplicationDefault()
        return firebase_admin.initialize_app(
            cred, {"databaseURL": database_url}, name=FIREBASE_APP_NAME
        )


class FirebaseRecordStore(RecordStore):
    """Backend for Firebase Realtime Database through the Admin SDK."""

    def __init__(self, database_url: str, credentials_path: Optional[str] = None):
        self.app = firebase_app(database_url, credentials_path)
        logger.info(f"Firebase record store connected to {database_url}")

    def _ref(self, path: str):
        return firebase_db.reference("/" + join_path(path), app=self.app)

    def get(self, path: str) -> Optional[Any]:
        try:
            return self._ref(path).get()
        except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
            raise StoreUnavailable(path, e) from e

    def set(self, path: str, value: Any) -> None:
        try:
            if value is None:
                self._ref(path).delete()
            else:
                self._ref(path).set(value)
        except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
            raise StoreUnavailable(path, e) from e

    def update(self, path: str, values: Dict[str, Any]) -> None:
        if not values:
            return
        try:
            self._ref(path).update(values)
        except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
            raise StoreUnavailable(path, e) from e

    def push(self, path: str, value: Any) -> str:
        try:
            return self._ref(path).push(value).key
        except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
            raise StoreUnavailable(path, e) from e

    def transaction(self, path: str, update: Callable[[Any], Any]) -> Any:
        # The SDK retries update() on contention, so it must be side-effect free
        try:
            return self._ref(path).transaction(update)
        except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
            raise StoreUnavailable(path, e) from e

    def subscribe(self, path: str, on_change: Listener) -> Unsubscribe:
        ref = self._ref(path)

        # Listener events carry partial patches; hand subscribers the whole node
        def handle_event(event):
            try:
                on_change(ref.get())
            except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
                logger.error(f"Error reading {path} after change event: {e}")

        try:
            registration = ref.listen(handle_event)
        except (FirebaseError, google_auth_exceptions.GoogleAuthError) as e:
            raise StoreUnavailable(path, e) from e
        return registration.close


def _prune(value: Any) -> Any:
    """Drop None leaves and empty maps the way the hosted database does."""
    if isinstance(value, dict):
        pruned = {}
        for key, child in value.items():
            child = _prune(child)
            if child is not None:
                pruned[str(key)] = child
        return pruned or None
    if isinstance(value, list):
        items = [_prune(child) for child in value]
        return items if any(item is not None for item in items) else None
    return value


class MemoryRecordStore(RecordStore):
    """
    In-process tree with the same path semantics as the hosted database.

    Used for local development (`STORE_BACKEND=memory`) and tests. Listeners
    are called synchronously after each write that touches their path.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._root: Dict[str, Any] = _prune(copy.deepcopy(initial or {})) or {}
        self._lock = threading.RLock()
        self._listeners: Dict[int, tuple] = {}
        self._next_listener = 0

    def get(self, path: str) -> Optional[Any]:
        with self._lock:
            node: Any = self._root
            for segment in split_path(path):
                if isinstance(node, dict):
                    node = node.get(segment)
                elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
                    node = node[int(segment)]
                else:
                    return None
                if node is None:
                    return None
            if node == {}:
                return None
            return copy.deepcopy(node)

    def _write(self, path: str, value: Any) -> None:
        segments = split_path(path)
        value = _prune(copy.deepcopy(value))
        if not segments:
            self._root = value if isinstance(value, dict) else {}
            return
        parents = [self._root]
        node = self._root
        for segment in segments[:-1]:
            child = node.get(segment)
            if isinstance(child, list):
                child = {str(i): item for i, item in enumerate(child) if item is not None}
                node[segment] = child
            if not isinstance(child, dict):
                if value is None:
                    return
                child = {}
                node[segment] = child
            node = child
            parents.append(node)
        if value is None:
            node.pop(segments[-1], None)
            # Remove parents emptied by the delete
            for depth in range(len(parents) - 1, 0, -1):
                if parents[depth]:
                    break
                parents[depth - 1].pop(segments[depth - 1], None)
        else:
            node[segments[-1]] = value

    def set(self, path: str, value: Any) -> None:
        with self._lock:
            self._write(path, value)
        self._notify([join_path(path)])

    def update(self, path: str, values: Dict[str, Any]) -> None:
        if not values:
            return
        changed = []
        with self._lock:
            for key, value in values.items():
                target = join_path(path, key)
                self._write(target, value)
                changed.append(target)
        self._notify(changed)

    def push(self, path: str, value: Any) -> str:
        # Time-ordered keys, like the hosted database's push ids
        key = f"-{int(time.time() * 1000):013d}{uuid.uuid4().hex[:7]}"
        self.set(join_path(path, key), value)
        return key

    def transaction(self, path: str, update: Callable[[Any], Any]) -> Any:
        with self._lock:
            self._write(path, update(self.get(path)))
            value = self.get(path)
        self._notify([join_path(path)])
        return value

    def subscribe(self, path: str, on_change: Listener) -> Unsubscribe:
        target = join_path(path)
        with self._lock:
            listener_id = self._next_listener
            self._next_listener += 1
            self._listeners[listener_id] = (target, on_change)
        on_change(self.get(target))

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def _notify(self, changed_paths: List[str]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for target, on_change in listeners:
            for changed in changed_paths:
                if _overlaps(target, changed):
                    on_change(self.get(target))
                    break


def _overlaps(a: str, b: str) -> bool:
    if not a or not b or a == b:
        return True
    return a.startswith(b + "/") or b.startswith(a + "/")


def read_collection(store: RecordStore, path: str) -> Dict[str, Dict[str, Any]]:
    """
    Read a whole collection as {key: record}.

    Sequential integer keys come back from the database as a list; those are
    re-keyed by index. Non-dict entries are skipped. Raises StoreUnavailable.
    """
    value = store.get(path)
    if isinstance(value, list):
        value = {str(i): item for i, item in enumerate(value) if item is not None}
    if not isinstance(value, dict):
        return {}
    return {str(key): record for key, record in value.items() if isinstance(record, dict)}
