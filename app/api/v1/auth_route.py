"""
Authentication endpoints.

Handles login (session cookie issuance), verification link resends and
logout.
"""

import logging

from fastapi import APIRouter, Depends, Response

from app.core.config import Settings
from app.core.exceptions import ValidationError
from app.core.security import clear_session_cookie, set_session_cookie
from app.dependencies.services import get_auth_service, get_settings, get_user_service
from app.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, ResendVerificationRequest
from app.schemas.user import VerificationResult
from app.services.auth_service import AuthService
from app.services.user_service import UserService

# Set up logger
logger = logging.getLogger(__name__)

auth_router = APIRouter()


@auth_router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials."}},
)
async def login(
    credentials: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """
    Authenticate a user and return their information.

    Also sets the ``sp_auth`` session cookie (identity token + role) used by
    request-gating middleware. Login succeeds even if the cookie cannot be
    placed.

    Returns:
        LoginResponse: Identity token and user profile.
    """
    result = await auth_service.login(credentials.email, credentials.password)
    set_session_cookie(response, result.id_token, result.user.role.value, settings)
    return LoginResponse(id_token=result.id_token, user=result.user)


@auth_router.post(
    "/resend-verification",
    response_model=VerificationResult,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Email is required."},
        404: {"description": "Account not found."},
    },
)
async def resend_verification(
    body: ResendVerificationRequest,
    user_service: UserService = Depends(get_user_service),
):
    """
    Resend the email verification link.

    Returns:
        VerificationResult: ``logged``/``link`` are present when SMTP is not configured.
    """
    email = (body.email or "").strip()
    if not email:
        raise ValidationError("Email is required")
    return await user_service.resend_verification(email)


@auth_router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Clear the session cookie. Always succeeds."""
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True)
