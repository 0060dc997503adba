"""
Shared fixtures: an in-memory record store, a fixed clock and an API client
whose store and auth provider are swapped for test doubles.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from houselook.core.auth import AuthError, AuthProvider, get_auth_provider
from houselook.db.database import get_store
from houselook.db.store import MemoryRecordStore, StoreUnavailable
from houselook.main import app
from houselook.schemas.user import AuthIdentity
from houselook.utils.normalize import now_millis

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)
HOUR_MS = 60 * 60 * 1000


class FakeAuthProvider(AuthProvider):
    """Bearer tokens are looked up in a dict instead of being verified."""

    def __init__(self):
        self.tokens = {
            "user-token": AuthIdentity(uid="user-1", email="tenant@example.com", display_name="Tenant", email_verified=True),
            "admin-token": AuthIdentity(uid="admin-1", email="admin@example.com", display_name="Admin", email_verified=True),
            "unverified-token": AuthIdentity(uid="user-2", email="new@example.com", email_verified=False),
        }
        self.accounts = {}

    def verify_token(self, token):
        if token not in self.tokens:
            raise AuthError("Could not validate credentials")
        return self.tokens[token]

    def create_account(self, name, email, password):
        if email in self.accounts:
            raise AuthError("An account with this email already exists.", status_code=400)
        identity = AuthIdentity(uid=f"uid-{len(self.accounts) + 1}", email=email, display_name=name)
        self.accounts[email] = identity
        return identity


class UnavailableStore(MemoryRecordStore):
    def get(self, path):
        raise StoreUnavailable(path, "offline")

    def set(self, path, value):
        raise StoreUnavailable(path, "offline")

    def update(self, path, values):
        raise StoreUnavailable(path, "offline")

    def push(self, path, value):
        raise StoreUnavailable(path, "offline")

    def transaction(self, path, update):
        raise StoreUnavailable(path, "offline")

    def subscribe(self, path, on_change):
        raise StoreUnavailable(path, "offline")


def listing(**fields):
    record = {
        "name": "Sunrise Apartments",
        "town": "Juja",
        "city": "Kiambu",
        "rent": 8000,
        "bedroom": "bedsitter",
        "available": True,
        "amenities": ["Wifi", "Water"],
        "images": ["https://img.example.com/1.jpg"],
    }
    record.update(fields)
    return record


@pytest.fixture
def store():
    return MemoryRecordStore({
        "users": {
            "admin-1": {"name": "Admin", "email": "admin@example.com", "points": 500, "isAdmin": True, "emailVerified": True},
            "user-1": {"name": "Tenant", "email": "tenant@example.com", "points": 100, "isAdmin": False, "emailVerified": True},
        },
        "property": {
            "p1": listing(),
            "p2": listing(name="Kahawa Heights", town="Kahawa", rent="KES 15,000", bedroom="1 bedroom", amenities=["Parking"]),
            "p3": listing(name="Ruaka Court", town="", city="Ruaka", rent=25000, available=False, status="full"),
        },
    })


@pytest.fixture
def auth_provider():
    return FakeAuthProvider()


@pytest.fixture
def client(store, auth_provider):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def offline_client(auth_provider):
    offline = UnavailableStore()
    app.dependency_overrides[get_store] = lambda: offline
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token="user-token"):
    return {"Authorization": f"Bearer {token}"}


def recent_ms(hours_ago=0):
    return now_millis() - int(hours_ago * HOUR_MS)
