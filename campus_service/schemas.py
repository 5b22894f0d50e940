"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime

from .domain.models import FollowType, MembershipStatus


# Request Schemas
class PostCreate(BaseModel):
    """Post creation request"""
    content: Optional[str] = Field(None, max_length=5000)
    image: Optional[str] = Field(None, max_length=500, description="Stored image reference")
    group_id: Optional[Union[int, str]] = Field(
        None, description="Target group id, or 'public'"
    )
    is_public: bool = False


class CommentCreate(BaseModel):
    """Comment creation request"""
    content: str = Field(..., max_length=2000)


class GroupCreate(BaseModel):
    """Group creation request"""
    name: str = Field(..., max_length=100)


class FollowCreate(BaseModel):
    """Follow a user or a group"""
    target_id: int
    type: FollowType


class ChatMessageCreate(BaseModel):
    """Direct message request. Missing fields are rejected by the service."""
    receiver_id: Optional[int] = None
    content: Optional[str] = Field(None, max_length=5000)


class ProfileUpdate(BaseModel):
    """Profile update request"""
    bio: str = Field("", max_length=500)
    profile_pic: Optional[str] = Field(None, max_length=500)


# Response Schemas
class MessageResponse(BaseModel):
    """Generic message response"""
    message: str
    success: bool = True


class PostResponse(BaseModel):
    """Post with author and group names"""
    id: int
    author_id: int
    author_name: Optional[str] = None
    group_id: Optional[int] = None
    group_name: Optional[str] = None
    content: str
    image: Optional[str] = None
    is_public: bool
    likes: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class FeedResponse(BaseModel):
    posts: List[PostResponse]
    count: int


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author_id: int
    author_name: Optional[str] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class GroupResponse(BaseModel):
    """Group as seen by the current viewer"""
    id: int
    name: str
    creator_id: Optional[int] = None
    creator_name: Optional[str] = None
    is_pre_created: bool = False
    status: Optional[MembershipStatus] = None

    class Config:
        from_attributes = True


class RosterEntryResponse(BaseModel):
    user_id: int
    name: Optional[str] = None
    status: MembershipStatus
    requested_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FollowResponse(BaseModel):
    """Response after follow action"""
    success: bool = True
    created: bool
    message: str


class ChatMessageResponse(BaseModel):
    id: int
    sender_id: int
    sender_name: Optional[str] = None
    receiver_id: int
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class UserProfile(BaseModel):
    """User profile response"""
    id: int
    email: str
    name: str
    course: Optional[str] = None
    batch: Optional[str] = None
    bio: str = ""
    profile_pic: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSummaryResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


# Internal Models
class Viewer(BaseModel):
    """Authenticated identity returned by the Auth Service"""
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    course: Optional[str] = None
    batch: Optional[str] = None
    is_active: bool = True
