"""
Follow routes
"""
from fastapi import APIRouter, Depends

from ...application.services import RelationshipService
from ...dependencies import get_current_user, get_relationship_service
from ...schemas import FollowCreate, FollowResponse, Viewer


router = APIRouter(prefix="/api/v1/follows", tags=["Follow"])


@router.post("", response_model=FollowResponse)
async def follow(
    follow_data: FollowCreate,
    current_user: Viewer = Depends(get_current_user),
    service: RelationshipService = Depends(get_relationship_service),
):
    """
    Follow a user or a group

    Following a group makes its posts appear in the feed.
    """
    created = await service.follow(current_user.id, follow_data.target_id, follow_data.type)
    message = "Now following" if created else "Already following"
    return FollowResponse(created=created, message=message)
