# File: houselook/api/api_v1/endpoints/properties.py
# Status: COMPLETE
# Dependencies: fastapi, houselook.services.property_service, houselook.services.saved_service
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from houselook.api import deps
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.property import (
    PropertyCreate,
    PropertyCreated,
    PropertyDetail,
    PropertyListItem,
    PropertySearch,
    PropertyUpdate,
)
from houselook.services.property_service import property_service
from houselook.services.saved_service import SavedHouses

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[PropertyListItem])
def search_properties(
    store: RecordStore = Depends(deps.get_store),
    location: Optional[str] = None,
    min_price: float = 0,
    max_price: Optional[float] = 30000,
    room_type: Optional[str] = None,
    amenities: List[str] = Query([]),
) -> Any:
    """
    Search listings. Amenities may be repeated or sent comma separated.
    """
    wanted = [a.strip() for value in amenities for a in value.split(",") if a.strip()]
    filters = PropertySearch(
        location=location,
        min_price=min_price,
        max_price=max_price,
        room_type=room_type,
        amenities=wanted,
    )
    return property_service.search(store, filters)


@router.get("/mine", response_model=List[PropertyListItem])
def read_my_properties(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    try:
        return property_service.get_user_properties(store, session.uid)
    except StoreUnavailable as e:
        logger.error(f"Error fetching properties for {session.uid}: {e}")
        return []


@router.get("/{property_id}", response_model=PropertyDetail)
def read_property(
    property_id: str,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_session),
) -> Any:
    try:
        detail = property_service.get_detail(store, property_id)
    except StoreUnavailable as e:
        logger.error(f"Error fetching property {property_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Property data is unavailable")
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

    if session.is_authenticated:
        try:
            detail["saved"] = SavedHouses(store).is_saved(session.uid, property_id)
        except StoreUnavailable as e:
            logger.error(f"Error checking saved state: {e}")
    return detail


@router.post("/", response_model=PropertyCreated, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: PropertyCreate,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    try:
        property_id = property_service.create_listing(store, property_in, created_by=session.uid)
    except StoreUnavailable as e:
        logger.error(f"Error adding property: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to list property. Please try again.")
    return {"id": property_id}


@router.patch("/{property_id}", response_model=PropertyDetail)
def update_property(
    property_id: str,
    property_in: PropertyUpdate,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    try:
        detail = property_service.update_listing(store, property_id, property_in)
    except StoreUnavailable as e:
        logger.error(f"Error updating property {property_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to update property")
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return detail
