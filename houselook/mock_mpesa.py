# File: houselook/mock_mpesa.py
# Stand-in for the Safaricom STK push sandbox, for local payment testing
import logging
import time
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from houselook.core.config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="HouseLook M-Pesa Mock API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", response_class=HTMLResponse)
def root():
    return "<h1>HouseLook M-Pesa Mock API Server</h1><p>This is a mock server for testing purposes</p>"


@app.post("/mpesa/stkpush/v1/processrequest")
def process_stk_push(payload: Optional[Dict[str, Any]] = Body(None)):
    """Accepts the Safaricom STK push body and answers like the sandbox does."""
    payload = payload or {}
    phone_number = payload.get("PhoneNumber")
    amount = payload.get("Amount")
    logger.info(f"Simulating STK Push: phone={phone_number} amount={amount} desc={payload.get('TransactionDesc')}")

    if not phone_number or not amount:
        return JSONResponse(status_code=400, content={"error": "PhoneNumber and Amount are required"})

    now_ms = int(time.time() * 1000)
    response = {
        "MerchantRequestID": f"mock_merchant_{now_ms}",
        "CheckoutRequestID": f"ws_CO_{now_ms}",
        "ResponseCode": "0",
        "ResponseDescription": "Success. Request accepted for processing",
        "CustomerMessage": "STK Push request has been initiated",
    }
    logger.info(f"Responding with mock M-Pesa data: {response}")
    return response


@app.post("/callback")
async def callback(request: Request):
    # Any body is accepted, JSON or not
    body = await request.body()
    logger.info(f"Mock M-Pesa callback received: {body.decode(errors='replace')}")
    return {"status": "OK"}


def main():
    import uvicorn
    logger.info(f"M-Pesa Mock Server running on http://localhost:{settings.MOCK_MPESA_PORT}")
    uvicorn.run(app, host="0.0.0.0", port=settings.MOCK_MPESA_PORT)


if __name__ == "__main__":
    main()
