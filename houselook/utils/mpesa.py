# File: houselook/utils/mpesa.py
# Status: COMPLETE
# Dependencies: requests, base64, datetime

import base64
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import requests

logger = logging.getLogger(__name__)


class MpesaError(Exception):
    """STK push request could not be completed"""


class MpesaClient:
    """Client for the M-Pesa STK push API (Safaricom sandbox or the local mock server)"""

    def __init__(
        self,
        base_url: str,
        shortcode: str,
        passkey: str = "",
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        callback_url: Optional[str] = None,
        timeout: int = 10,
    ):
        """
        Initialize M-Pesa client

        Args:
            base_url: API root, e.g. https://sandbox.safaricom.co.ke or http://localhost:3005
            shortcode: M-Pesa shortcode (paybill or till number)
            passkey: M-Pesa passkey
            consumer_key: API consumer key; OAuth is skipped when unset (mock server)
            consumer_secret: API consumer secret
            callback_url: Where M-Pesa posts the payment result
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.shortcode = shortcode
        self.passkey = passkey
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.callback_url = callback_url or f"{self.base_url}/callback"
        self.timeout = timeout

        # API endpoints
        self.auth_url = f"{self.base_url}/oauth/v1/generate?grant_type=client_credentials"
        self.stk_push_url = f"{self.base_url}/mpesa/stkpush/v1/processrequest"

    def _get_auth_token(self) -> Optional[str]:
        if not (self.consumer_key and self.consumer_secret):
            return None

        auth_string = f"{self.consumer_key}:{self.consumer_secret}"
        auth_b64 = base64.b64encode(auth_string.encode("ascii")).decode("ascii")
        response = requests.get(
            self.auth_url,
            headers={"Authorization": f"Basic {auth_b64}"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json().get("access_token")

    def _get_password(self) -> Tuple[str, str]:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        password_str = f"{self.shortcode}{self.passkey}{timestamp}"
        return base64.b64encode(password_str.encode("ascii")).decode("ascii"), timestamp

    def stk_push(
        self,
        phone_number: str,
        amount: float,
        account_reference: str,
        transaction_desc: str,
    ) -> Dict[str, Any]:
        """
        Initiate STK push payment

        Args:
            phone_number: Customer phone number (format: 254XXXXXXXXX)
            amount: Amount to charge
            account_reference: Payment reference
            transaction_desc: Transaction description

        Returns:
            Dictionary with M-Pesa API response

        Raises:
            MpesaError: on network failure or a non-2xx response
        """
        password, timestamp = self._get_password()
        payload = {
            "BusinessShortCode": self.shortcode,
            "Password": password,
            "Timestamp": timestamp,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": int(amount),  # No decimals
            "PartyA": phone_number,
            "PartyB": self.shortcode,
            "PhoneNumber": phone_number,
            "CallBackURL": self.callback_url,
            "AccountReference": account_reference,
            "TransactionDesc": transaction_desc,
        }

        try:
            token = self._get_auth_token()
            headers = {"Content-Type": "application/json"}
            if token:
                headers["Authorization"] = f"Bearer {token}"

            response = requests.post(
                self.stk_push_url,
                headers=headers,
                data=json.dumps(payload),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"STK push request failed: {e}")
            raise MpesaError(f"Could not reach M-Pesa at {self.base_url}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}
        if response.status_code >= 400:
            message = result.get("error") or result.get("errorMessage") or response.text
            logger.warning(f"STK push rejected ({response.status_code}): {message}")
            raise MpesaError(message)
        return result
