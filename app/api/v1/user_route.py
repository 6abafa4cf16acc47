"""
User profile endpoints.

Handles account creation and CRUD over stored profiles.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from app.dependencies.services import get_user_service
from app.schemas.user import UserCreate, UserCreateResponse, UserProfile, UserUpdate
from app.services.user_service import UserService, to_document


logger = logging.getLogger(__name__)

users_router = APIRouter()


@users_router.post(
    "",
    response_model=UserCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    user_data: UserCreate,
    user_service: UserService = Depends(get_user_service),
):
    """
    Create an account and its profile, then send the verification email.

    Email delivery is best-effort; ``logged`` and ``link`` are set only when
    SMTP is not configured and are null otherwise.

    Returns:
        UserCreateResponse: Stored profile plus verification outcome.
    """
    profile, verification = await user_service.create(user_data)
    outcome = verification.model_dump() if verification is not None else {}
    return UserCreateResponse.model_validate({**to_document(profile), **outcome})


@users_router.get("", response_model=List[UserProfile])
async def list_users(user_service: UserService = Depends(get_user_service)):
    """List all stored profiles."""
    return await user_service.find_all()


@users_router.get("/{user_id}", response_model=UserProfile)
async def get_user(user_id: str, user_service: UserService = Depends(get_user_service)):
    """Get one profile by uid."""
    return await user_service.find_one(user_id)


@users_router.patch("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: str,
    changes: UserUpdate,
    user_service: UserService = Depends(get_user_service),
):
    """Merge the given fields into a profile and return the result."""
    return await user_service.update(user_id, changes)


@users_router.delete("/{user_id}", response_model=UserProfile)
async def delete_user(user_id: str, user_service: UserService = Depends(get_user_service)):
    """Delete a profile and return what was deleted."""
    return await user_service.remove(user_id)
