# File: houselook/schemas/property.py
# Dependencies: pydantic, houselook.schemas.base

from typing import List, Optional, Union

from pydantic import Field, field_validator

from houselook.schemas.base import BaseSchema


def _split_amenities(v):
    # The listing form sends amenities as one comma separated string
    if v is None:
        return []
    if isinstance(v, str):
        return [a.strip() for a in v.split(",") if a.strip()]
    return [str(a).strip() for a in v if str(a).strip()]


class AgentContact(BaseSchema):
    name: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None


class Coordinates(BaseSchema):
    lat: Optional[float] = None
    lng: Optional[float] = None


# Search result card
class PropertyListItem(BaseSchema):
    id: str
    name: str
    city: str
    rent: float
    bedroom: str
    image: str
    images: List[str] = []
    amenities: List[str] = []
    vacancies: str = "0"
    available: bool = False


# Full house details page
class PropertyDetail(BaseSchema):
    id: str
    title: str
    location: str
    price: int
    type: str = ""
    images: List[str] = []
    amenities: List[str] = []
    available: bool = False
    description: str = ""
    features: List[str] = []
    agent: AgentContact
    coordinates: Coordinates
    saved: bool = False


class PropertySearch(BaseSchema):
    location: Optional[str] = None
    min_price: float = 0
    max_price: Optional[float] = 30000
    room_type: Optional[str] = None
    amenities: List[str] = []


# Listing form submitted by admins
class PropertyCreate(BaseSchema):
    property_name: str = Field(..., min_length=1)
    property_category: str = "flat"
    unit_type: str = "bedsitter"
    rent_amount: Union[float, str]
    deposit_amount: Optional[Union[float, str]] = None
    furnished_status: str = "unfurnished"  # furnished | semi-furnished | unfurnished
    amenities: List[str] = []
    county: str = ""
    sub_county: str = ""
    city: str = ""
    town: str = ""
    address: str = ""
    latitude: Optional[Union[float, str]] = None
    longitude: Optional[Union[float, str]] = None
    description: str = ""
    directions: str = ""
    agent_name: str = Field(..., min_length=1)
    agent_phone: str = Field(..., min_length=1)
    images: List[str] = []

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v):
        return _split_amenities(v)

    @field_validator("property_name", "agent_name", "agent_phone")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("rent_amount")
    @classmethod
    def rent_present(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("rent is required")
        return v


# Admin edits; only the fields sent are written
class PropertyUpdate(BaseSchema):
    name: Optional[str] = None
    rent: Optional[Union[float, str]] = None
    deposit: Optional[float] = None
    available: Optional[bool] = None
    status: Optional[str] = None
    town: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    description: Optional[str] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v):
        if v is None:
            return None
        return _split_amenities(v)


class PropertyCreated(BaseSchema):
    id: str
    message: str = "Property listed successfully"
