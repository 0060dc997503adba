# File: houselook/core/dependencies.py
# Status: COMPLETE
# Dependencies: fastapi, houselook.core.auth, houselook.db.database
from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from houselook.core.auth import AuthError, AuthProvider, get_auth_provider
from houselook.core.session import SessionContext
from houselook.db.database import get_store
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.user import AuthIdentity
from houselook.services.user_service import user_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    provider: AuthProvider = Depends(get_auth_provider),
) -> Optional[AuthIdentity]:
    if credentials is None:
        return None
    try:
        return provider.verify_token(credentials.credentials)
    except AuthError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_session(
    store: RecordStore = Depends(get_store),
    identity: Optional[AuthIdentity] = Depends(get_identity),
    redirect_after_login: Optional[str] = Header(None, alias="X-Redirect-After-Login"),
) -> SessionContext:
    session = SessionContext(store, redirect_after_login=redirect_after_login)
    session.on_auth_state_changed(identity)
    if identity is not None:
        # Mirror the account under users/{uid} the first time we see it
        try:
            user_service.ensure_user_record(store, identity)
        except StoreUnavailable as e:
            logger.error(f"Could not mirror user {identity.uid}: {e}")
    return session


def get_current_user(
    session: SessionContext = Depends(get_session),
) -> SessionContext:
    if not session.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not session.identity.email_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Please verify your email address before signing in. Check your inbox for a verification email.",
        )
    return session


def get_current_admin_user(
    session: SessionContext = Depends(get_current_user),
) -> SessionContext:
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admins only.",
        )
    return session
