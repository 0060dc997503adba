# File: houselook/core/auth.py
# Auth provider: Firebase ID token verification and account creation
# Dependencies: firebase-admin

import logging
from typing import Optional

from firebase_admin import auth as firebase_auth
from firebase_admin.exceptions import FirebaseError

from houselook.core.config import settings
from houselook.db.store import firebase_app
from houselook.schemas.user import AuthIdentity

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Auth failure carrying a message that is safe to show the user."""

    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthProvider:
    def verify_token(self, token: str) -> AuthIdentity:
        raise NotImplementedError

    def create_account(self, name: str, email: str, password: str) -> AuthIdentity:
        raise NotImplementedError


class FirebaseAuthProvider(AuthProvider):
    def __init__(self, app=None):
        self.app = app or firebase_app(settings.FIREBASE_DATABASE_URL, settings.FIREBASE_CREDENTIALS)

    def verify_token(self, token: str) -> AuthIdentity:
        try:
            claims = firebase_auth.verify_id_token(token, app=self.app)
        except firebase_auth.ExpiredIdTokenError:
            raise AuthError("Your session has expired. Please sign in again.")
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            logger.warning(f"Rejected ID token: {e}")
            raise AuthError("Could not validate credentials")
        except FirebaseError as e:
            logger.error(f"Token verification failed: {e}")
            raise AuthError("Authentication service unavailable. Please try again.", status_code=503)

        return AuthIdentity(
            uid=claims["uid"],
            email=claims.get("email"),
            display_name=claims.get("name"),
            email_verified=bool(claims.get("email_verified", False)),
        )

    def create_account(self, name: str, email: str, password: str) -> AuthIdentity:
        try:
            user = firebase_auth.create_user(
                email=email, password=password, display_name=name, app=self.app
            )
        except firebase_auth.EmailAlreadyExistsError:
            raise AuthError("An account with this email already exists.", status_code=400)
        except (FirebaseError, ValueError) as e:
            logger.error(f"Account creation failed for {email}: {e}")
            raise AuthError("Failed to create an account. Please try again.", status_code=400)

        logger.info(f"Created account {user.uid} for {email}")
        return AuthIdentity(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name or name,
            email_verified=bool(user.email_verified),
        )


_provider: Optional[AuthProvider] = None


def get_auth_provider() -> AuthProvider:
    global _provider
    if _provider is None:
        _provider = FirebaseAuthProvider()
    return _provider
