# File: houselook/api/api_v1/endpoints/payments.py
# Dependencies: fastapi, houselook.services.payment_service
from typing import Any, Dict
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status

from houselook.api import deps
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.transaction import StkPushRequest, StkPushResult
from houselook.services.payment_service import payment_service
from houselook.utils.mpesa import MpesaError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/stkpush", response_model=StkPushResult)
def initiate_payment(
    payment_in: StkPushRequest,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_user),
) -> Any:
    """
    Start an M-Pesa STK push for buying points. The transaction is written
    when M-Pesa calls back with the result.
    """
    try:
        return payment_service.initiate_stk_push(store, session.uid, payment_in)
    except MpesaError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Payment failed: {e}")
    except StoreUnavailable as e:
        logger.error(f"STK push sent but not recorded as pending: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to record the payment")


@router.post("/callback", response_model=Dict[str, Any])
def mpesa_callback(
    payload: Dict[str, Any] = Body(...),
    store: RecordStore = Depends(deps.get_store),
) -> Any:
    """M-Pesa payment result callback."""
    try:
        transaction_id = payment_service.handle_callback(store, payload)
    except StoreUnavailable as e:
        logger.error(f"Error applying M-Pesa callback: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Callback not applied")
    return {"status": "OK", "transaction_id": transaction_id}
