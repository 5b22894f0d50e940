"""
User profile routes
"""
from fastapi import APIRouter, Depends
from typing import List

from ...application.services import UserService
from ...dependencies import get_current_user, get_user_service
from ...schemas import (
    MessageResponse,
    ProfileUpdate,
    UserProfile,
    UserSummaryResponse,
    Viewer,
)


router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me", response_model=UserProfile)
async def get_my_profile(
    current_user: Viewer = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Get current user's profile"""
    user = await service.get_profile(current_user.id)
    return UserProfile.model_validate(user)


@router.put("/me", response_model=MessageResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: Viewer = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Update bio and, optionally, the profile picture reference"""
    await service.update_profile(
        current_user.id, profile_data.bio, profile_data.profile_pic
    )
    return MessageResponse(message="Profile updated")


@router.get("", response_model=List[UserSummaryResponse])
async def list_users(
    current_user: Viewer = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Everyone except the current user"""
    users = await service.list_other_users(current_user.id)
    return [UserSummaryResponse.model_validate(user) for user in users]
