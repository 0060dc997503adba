# File: houselook/schemas/transaction.py
# Status: COMPLETE
# Dependencies: pydantic, houselook.schemas.base
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from houselook.schemas.base import BaseSchema


class TransactionCreate(BaseSchema):
    userId: str
    amount: float
    type: str
    description: str = ""
    status: Literal["pending", "completed", "failed"] = "pending"
    paymentMethod: Optional[str] = None
    reference: Optional[str] = None
    points: Optional[int] = None


# M-Pesa payment request
class StkPushRequest(BaseModel):
    phone_number: str = Field(..., min_length=9)
    amount: float = Field(..., gt=0)
    description: str = "HouseLook points"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "phone_number": "254712345678",
                "amount": 500
            }
        }
    )


class StkPushResult(BaseSchema):
    merchant_request_id: Optional[str] = None
    checkout_request_id: str
    response_code: Optional[str] = None
    customer_message: Optional[str] = None
