

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    """Roles stored on a profile; anything above USER is gated elsewhere."""
    USER = "USER"
    ADMIN = "ADMIN"


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserProfile(CamelModel):
    """Profile document stored per account, keyed by the provider uid."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    uid: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    purchases: List[Any] = Field(default_factory=list)
    role: UserRole = UserRole.USER


class UserCreate(CamelModel):
    """Schema for creating a new account."""
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    phone_number: Optional[str] = None


class UserUpdate(CamelModel):
    """
    Partial profile update.

    Only fields present in the request are merged; unknown keys are kept on
    the document as sent.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    email: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    purchases: Optional[List[Any]] = None
    role: Optional[UserRole] = None


class VerificationResult(BaseModel):
    """Outcome of a verification email dispatch."""
    success: bool = True
    logged: Optional[bool] = None
    link: Optional[str] = None


class UserCreateResponse(UserProfile):
    """Created profile plus the verification email outcome."""
    success: bool = True
    logged: Optional[bool] = None
    link: Optional[str] = None
