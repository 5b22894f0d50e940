"""
Group registry and membership routes
"""
from fastapi import APIRouter, Depends, status
from typing import List

from ...application.services import GroupRegistryService, MembershipService
from ...dependencies import (
    get_current_user,
    get_group_registry_service,
    get_membership_service,
)
from ...schemas import (
    GroupCreate,
    GroupResponse,
    MessageResponse,
    RosterEntryResponse,
    Viewer,
)


router = APIRouter(prefix="/api/v1/groups", tags=["Groups"])


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_user: Viewer = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
):
    """Every group, with the viewer's membership status if any"""
    groups = await service.list_groups_for_viewer(current_user.id)
    return [GroupResponse.model_validate(group) for group in groups]


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_user: Viewer = Depends(get_current_user),
    service: GroupRegistryService = Depends(get_group_registry_service),
):
    """Create a group owned by the viewer"""
    group = await service.create_group(current_user.id, group_data.name)
    return GroupResponse.model_validate(group)


@router.post("/{group_id}/join", response_model=MessageResponse)
async def join_group(
    group_id: int,
    current_user: Viewer = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
):
    """
    Request to join a group

    The request stays pending. Repeated requests are accepted and change nothing.
    """
    created = await service.request_join(current_user.id, group_id)
    message = "Join request sent" if created else "Join request already exists"
    return MessageResponse(message=message)


@router.get("/{group_id}/members", response_model=List[RosterEntryResponse])
async def list_members(
    group_id: int,
    current_user: Viewer = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
):
    """Group roster with each member's status"""
    roster = await service.list_roster(group_id)
    return [RosterEntryResponse.model_validate(entry) for entry in roster]
