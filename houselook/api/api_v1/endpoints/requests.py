# File: houselook/api/api_v1/endpoints/requests.py
# Dependencies: fastapi, houselook.services.request_service
from typing import Any, List
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from houselook.api import deps
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.property_request import PropertyRequest, PropertyRequestCreate
from houselook.services.request_service import request_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=PropertyRequest, status_code=status.HTTP_201_CREATED)
def submit_request(
    request_in: PropertyRequestCreate,
    store: RecordStore = Depends(deps.get_store),
) -> Any:
    try:
        return request_service.submit(store, request_in)
    except StoreUnavailable as e:
        logger.error(f"Error saving property request: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not send your request. Please try again.",
        )


@router.get("/", response_model=List[PropertyRequest])
def list_requests(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    try:
        return request_service.list_requests(store)
    except StoreUnavailable as e:
        logger.error(f"Error loading property requests: {e}")
        return []


@router.post("/{request_id}/contacted", response_model=PropertyRequest)
def mark_contacted(
    request_id: str,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    try:
        request = request_service.mark_contacted(store, request_id)
    except StoreUnavailable as e:
        logger.error(f"Error updating property request {request_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to update request")
    if request is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")
    return request
