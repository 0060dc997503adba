# File: houselook/api/api_v1/endpoints/users.py
# Status: COMPLETE
# Dependencies: fastapi, houselook.services.user_service
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from houselook.api import deps
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.user import PointsResponse, UserProfile
from houselook.services.property_service import property_service
from houselook.services.saved_service import SavedHouses
from houselook.services.user_service import user_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _store_error(e: StoreUnavailable) -> HTTPException:
    logger.error(f"User data unavailable: {e}")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="User data is unavailable")


@router.get("/me", response_model=UserProfile)
def read_user_me(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    user = session.user
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    try:
        saved_count = len(SavedHouses(store).list_valid(session.uid))
        property_count = len(property_service.get_user_properties(store, session.uid))
    except StoreUnavailable as e:
        raise _store_error(e)
    return dict(user, saved_count=saved_count, property_count=property_count)


@router.get("/me/points", response_model=PointsResponse)
def read_points(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    try:
        points = user_service.get_points(store, session.uid)
    except StoreUnavailable as e:
        raise _store_error(e)
    return {"uid": session.uid, "points": points}


@router.post("/me/activity", response_model=Dict[str, int])
def update_activity(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    try:
        last_active = user_service.update_activity(store, session.uid)
    except StoreUnavailable as e:
        raise _store_error(e)
    return {"lastActive": last_active}


@router.get("/me/transactions", response_model=Dict[str, Any])
def read_transactions(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    try:
        return user_service.get_user_transactions(store, session.uid)
    except StoreUnavailable as e:
        raise _store_error(e)
