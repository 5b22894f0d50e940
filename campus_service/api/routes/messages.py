"""
Direct message routes
"""
from fastapi import APIRouter, Depends, status
from typing import List

from ...application.services import MessagingService
from ...dependencies import get_current_user, get_messaging_service
from ...schemas import ChatMessageCreate, ChatMessageResponse, Viewer


router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


@router.get("/{other_user_id}", response_model=List[ChatMessageResponse])
async def get_thread(
    other_user_id: int,
    current_user: Viewer = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    """Conversation with another user, oldest first"""
    thread = await service.list_thread(current_user.id, other_user_id)
    return [ChatMessageResponse.model_validate(message) for message in thread]


@router.post("", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: ChatMessageCreate,
    current_user: Viewer = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    """Send a direct message"""
    message = await service.send(
        current_user.id, message_data.receiver_id, message_data.content
    )
    return ChatMessageResponse.model_validate(message)
