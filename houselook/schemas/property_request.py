# File: houselook/schemas/property_request.py
from typing import Optional

from pydantic import Field

from houselook.schemas.base import BaseSchema


class PropertyRequestCreate(BaseSchema):
    name: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=3, description="Email address or phone number")
    propertyName: Optional[str] = None
    location: Optional[str] = None
    message: Optional[str] = None


class PropertyRequest(PropertyRequestCreate):
    id: str
    createdAt: Optional[str] = None
    contacted: bool = False
