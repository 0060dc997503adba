# File: houselook/api/api_v1/endpoints/auth.py
# Status: COMPLETE
# Dependencies: fastapi, houselook.core.auth, houselook.services.user_service
from typing import Any
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from houselook.api import deps
from houselook.core.auth import AuthError, AuthProvider, get_auth_provider
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.user import SessionInfo, UserRecord, UserRegister
from houselook.services.user_service import user_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserRecord, status_code=status.HTTP_201_CREATED)
def register(
    user_in: UserRegister,
    store: RecordStore = Depends(deps.get_store),
    provider: AuthProvider = Depends(get_auth_provider),
) -> Any:
    """
    Create an account with the auth provider and mirror it under users/{uid}.
    The account must verify its email before it can sign in.
    """
    logger.info(f"Registration attempt for email: {user_in.email}")
    try:
        identity = provider.create_account(user_in.name, user_in.email, user_in.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        return user_service.ensure_user_record(store, identity, name=user_in.name)
    except StoreUnavailable as e:
        logger.error(f"Account {identity.uid} created but its record was not written: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to create an account. Please try again.",
        )


@router.get("/session", response_model=SessionInfo)
def read_session(session: SessionContext = Depends(deps.get_session)) -> Any:
    """Who is signed in, if anyone."""
    return session.to_info()


@router.post("/login", response_model=SessionInfo)
def login(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    """
    Called by the client right after it signs in with the auth provider.
    Stamps lastLoginAt, which drives the active users figure.
    """
    try:
        user_service.record_login(store, session.uid)
    except StoreUnavailable as e:
        logger.error(f"Could not record login for {session.uid}: {e}")
    session.invalidate()
    return session.to_info()
