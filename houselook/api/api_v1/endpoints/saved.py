# File: houselook/api/api_v1/endpoints/saved.py
# Dependencies: fastapi, houselook.services.saved_service
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from houselook.api import deps
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.services.saved_service import SavedHouses

router = APIRouter()
logger = logging.getLogger(__name__)


def _unavailable(action: str, e: StoreUnavailable) -> HTTPException:
    logger.error(f"Error {action} saved house: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Saved houses are unavailable right now. Please try again.",
    )


@router.get("/", response_model=Dict[str, Any])
def read_saved_houses(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    """
    Listings the user saved within the last 24 hours. Reading this list
    evicts anything older.
    """
    try:
        houses = SavedHouses(store).list_saved_properties(session.uid)
    except StoreUnavailable as e:
        raise _unavailable("reading", e)
    return {"houses": houses, "count": len(houses)}


@router.put("/{property_id}", response_model=Dict[str, Any])
def save_house(
    property_id: str,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    saved = SavedHouses(store)
    try:
        saved_at = saved.save(session.uid, property_id)
    except StoreUnavailable as e:
        raise _unavailable("saving", e)
    return {"id": property_id, "saved": True, "savedAt": saved_at, "expiresAt": saved_at + saved.ttl_ms}


@router.delete("/{property_id}", response_model=Dict[str, Any])
def unsave_house(
    property_id: str,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    try:
        SavedHouses(store).unsave(session.uid, property_id)
    except StoreUnavailable as e:
        raise _unavailable("removing", e)
    return {"id": property_id, "saved": False}
