# =============================================================================
# app/routers/user.py - User Profile Endpoints
# =============================================================================
# Mounted behind the bearer-token gate.
# =============================================================================

import asyncio

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.auth import AuthUser, UserResponse, get_current_user
from app.exceptions import BadRequestException, NotFoundException
from core.services.user_service import UserService

router = APIRouter()


class UserUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    profile_picture: str | None = Field(default=None, max_length=2048)


@router.get("/current-user", response_model=UserResponse)
async def get_current_user_profile(user: AuthUser = Depends(get_current_user)):
    """Profile of the authenticated user."""
    profile = await asyncio.to_thread(UserService.get_user_by_id, user.id)
    if profile is None:
        raise NotFoundException("User", str(user.id))
    return UserResponse(**profile)


@router.put("/update", response_model=UserResponse)
async def update_user(
    body: UserUpdateRequest,
    user: AuthUser = Depends(get_current_user),
):
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise BadRequestException("Nothing to update")
    profile = await asyncio.to_thread(UserService.update_user, user.id, updates)
    return UserResponse(**profile)
