# File: houselook/schemas/user.py
# Dependencies: pydantic, email-validator

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from houselook.schemas.base import BaseSchema
from houselook.utils.normalize import to_number


# Identity handed over by the auth provider
class AuthIdentity(BaseSchema):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False


# Mirror stored under users/{uid}
class UserRecord(BaseSchema):
    uid: str
    name: str = ""
    email: str = ""
    points: int = 0
    createdAt: Optional[str] = None
    isAdmin: bool = False
    emailVerified: bool = False

    @field_validator("points", mode="before")
    @classmethod
    def coerce_points(cls, v):
        return int(to_number(v))

    @field_validator("name", "email", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("createdAt", mode="before")
    @classmethod
    def coerce_created_at(cls, v):
        return None if v is None else str(v)

    # Only a literal true grants a flag
    @field_validator("isAdmin", "emailVerified", mode="before")
    @classmethod
    def coerce_flag(cls, v):
        return v is True


class UserProfile(UserRecord):
    saved_count: int = 0
    property_count: int = 0


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)


class PointsResponse(BaseSchema):
    uid: str
    points: int


class SessionInfo(BaseSchema):
    isAuthenticated: bool
    user: Optional[UserRecord] = None
    redirectAfterLogin: Optional[str] = None
