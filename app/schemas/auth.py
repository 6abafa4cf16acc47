

from typing import Optional

from pydantic import BaseModel, EmailStr

from app.schemas.user import CamelModel, UserProfile


class LoginRequest(BaseModel):
    """Schema for email/password login."""
    email: EmailStr
    password: str


class LoginResponse(CamelModel):
    """Schema for login response with the provider identity token."""
    id_token: str
    user: UserProfile


class ResendVerificationRequest(BaseModel):
    """Schema for resending the verification link; email is checked by the route."""
    email: Optional[str] = None


class LogoutResponse(BaseModel):
    success: bool = True
