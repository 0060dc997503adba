# File: houselook/services/payment_service.py
# Transactions ledger and M-Pesa STK push payments for points
# Dependencies: houselook.utils.mpesa

import logging
import random
import string
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from houselook.core.config import settings
from houselook.db import collections
from houselook.db.store import RecordStore, StoreUnavailable
from houselook.schemas.transaction import StkPushRequest, TransactionCreate
from houselook.utils.mpesa import MpesaClient, MpesaError
from houselook.utils.normalize import now_millis, to_number

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_lowercase


def new_transaction_id(now_ms: int) -> str:
    suffix = "".join(random.choice(BASE36) for _ in range(9))
    return f"transaction_{now_ms}_{suffix}"


def mpesa_client_from_settings() -> MpesaClient:
    return MpesaClient(
        base_url=settings.MPESA_BASE_URL,
        shortcode=settings.MPESA_SHORTCODE,
        passkey=settings.MPESA_PASSKEY,
        consumer_key=settings.MPESA_CONSUMER_KEY,
        consumer_secret=settings.MPESA_CONSUMER_SECRET,
        callback_url=settings.MPESA_CALLBACK_URL,
        timeout=settings.MPESA_TIMEOUT,
    )


class PaymentService:
    """
    Points are bought one shilling per point. An STK push is parked under
    pendingPayments until M-Pesa calls back; only then is a transaction
    written, so every transaction record is final when it lands.
    """

    def __init__(self, clock: Callable[[], int] = now_millis, client_factory=mpesa_client_from_settings):
        self.clock = clock
        self.client_factory = client_factory

    def build_transaction(self, data: TransactionCreate) -> Dict[str, Any]:
        """A transaction record under a fresh id, stamped with the current time."""
        now_ms = self.clock()
        transaction_id = new_transaction_id(now_ms)
        record = data.model_dump(exclude_none=True)
        record.update({
            "timestamp": now_ms,
            "date": datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "id": transaction_id,
        })
        return record

    def initiate_stk_push(self, store: RecordStore, user_id: str, payment: StkPushRequest) -> Dict[str, Any]:
        """
        Ask M-Pesa to prompt the customer's phone and remember the request
        until its callback arrives.

        Raises:
            MpesaError: when M-Pesa is unreachable or rejects the request
        """
        client = self.client_factory()
        response = client.stk_push(
            phone_number=payment.phone_number,
            amount=payment.amount,
            account_reference=user_id,
            transaction_desc=payment.description,
        )
        checkout_id = response.get("CheckoutRequestID")
        if not checkout_id:
            raise MpesaError("M-Pesa did not return a CheckoutRequestID")

        store.set(collections.pending_payment_path(checkout_id), {
            "userId": user_id,
            "amount": payment.amount,
            "points": int(payment.amount),
            "description": payment.description,
            "createdAt": self.clock(),
        })
        logger.info(f"STK push {checkout_id} sent for {user_id}")
        return {
            "merchant_request_id": response.get("MerchantRequestID"),
            "checkout_request_id": checkout_id,
            "response_code": response.get("ResponseCode"),
            "customer_message": response.get("CustomerMessage"),
        }

    def _credit_once(self, store: RecordStore, pending_path: str, user_id: str, points: int) -> None:
        """
        Credit a settled payment's points exactly once.

        The pending entry is claimed with a per-attempt token before the
        balance is touched; a retry or a concurrent callback finds the claim
        and skips the credit. A failed credit gives the claim back so the
        next callback can try again.
        """
        token = uuid.uuid4().hex

        def claim(current):
            if isinstance(current, dict) and not current.get("creditedBy"):
                return dict(current, creditedBy=token)
            return current

        claimed = store.transaction(pending_path, claim)
        if not isinstance(claimed, dict) or claimed.get("creditedBy") != token:
            logger.info(f"Points for {pending_path} already credited")
            return

        points_path = f"{collections.user_path(user_id)}/points"
        try:
            balance = store.transaction(points_path, lambda current: int(to_number(current)) + points)
        except StoreUnavailable:
            store.set(f"{pending_path}/creditedBy", None)
            raise
        logger.info(f"Credited {points} points to {user_id}, balance {balance}")

    def handle_callback(self, store: RecordStore, payload: Dict[str, Any]) -> Optional[str]:
        """
        Settle a parked STK push from its M-Pesa callback.

        Points are credited first. The transaction record and the removal of
        the pending entry then land in one multi-path write, so a callback that
        fails part way leaves the pending entry for M-Pesa's retry.

        Returns the new transaction id, or None when the callback names no
        pending payment (unknown or already settled).
        """
        callback = ((payload or {}).get("Body") or {}).get("stkCallback") or {}
        checkout_id = callback.get("CheckoutRequestID")
        if not checkout_id:
            logger.warning("M-Pesa callback without CheckoutRequestID")
            return None

        path = collections.pending_payment_path(checkout_id)
        pending = store.get(path)
        if not isinstance(pending, dict) or not pending.get("userId"):
            logger.warning(f"No pending payment for checkout request {checkout_id}")
            return None

        succeeded = str(callback.get("ResultCode", "")) == "0"
        points = int(to_number(pending.get("points")))
        if succeeded and points:
            self._credit_once(store, path, pending["userId"], points)

        record = self.build_transaction(TransactionCreate(
            userId=pending["userId"],
            amount=to_number(pending.get("amount")),
            type="points_purchase",
            description=pending.get("description") or "",
            status="completed" if succeeded else "failed",
            paymentMethod="mpesa",
            reference=checkout_id,
            points=points if succeeded else None,
        ))
        store.update("", {
            collections.transaction_path(record["id"]): record,
            path: None,
        })
        logger.info(f"Settled {record['status']} payment {checkout_id} as {record['id']}")
        return record["id"]


# Create singleton instance
payment_service = PaymentService()
