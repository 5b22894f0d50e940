"""
Domain models - Core business entities
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from ..errors import ValidationError

PUBLIC_AUDIENCE = "public"


class FollowType(str, Enum):
    """Kind of target a follow edge points at"""
    USER = "user"
    GROUP = "group"


class MembershipStatus(str, Enum):
    """Membership lifecycle. Join requests start as pending."""
    PENDING = "pending"
    APPROVED = "approved"


class WriteResult(str, Enum):
    """Outcome of a write aimed at one existing row"""
    APPLIED = "applied"
    NOT_FOUND = "not_found"

    @classmethod
    def from_count(cls, count: int) -> "WriteResult":
        return cls.APPLIED if count > 0 else cls.NOT_FOUND


@dataclass
class User:
    """User domain model"""
    id: int
    email: str
    name: str
    course: Optional[str] = None
    batch: Optional[str] = None
    bio: str = ""
    profile_pic: str = "default-profile.png"
    created_at: Optional[datetime] = None


@dataclass
class UserSummary:
    id: int
    name: str


@dataclass
class Group:
    """Group domain model"""
    id: int
    name: str
    creator_id: Optional[int]
    is_pre_created: bool = False
    created_at: Optional[datetime] = None
    creator_name: Optional[str] = None


@dataclass
class GroupListing:
    """A group as one viewer sees it, with that viewer's membership status"""
    id: int
    name: str
    creator_id: Optional[int]
    is_pre_created: bool
    creator_name: Optional[str] = None
    status: Optional[MembershipStatus] = None


@dataclass
class Membership:
    """Membership edge between a group and a user"""
    id: int
    group_id: int
    user_id: int
    status: MembershipStatus = MembershipStatus.PENDING
    created_at: Optional[datetime] = None

    def is_approved(self) -> bool:
        return self.status == MembershipStatus.APPROVED


@dataclass
class RosterEntry:
    user_id: int
    name: Optional[str]
    status: MembershipStatus
    requested_at: Optional[datetime] = None


@dataclass
class Follow:
    """Directed follow edge"""
    id: int
    follower_id: int
    target_id: int
    type: FollowType
    created_at: Optional[datetime] = None


@dataclass
class Post:
    """Post domain model

    A post is public (no group) or scoped to a group, never both. A post
    with neither is only reachable through its author's followers.
    """
    id: int
    author_id: int
    content: str
    is_public: bool
    group_id: Optional[int] = None
    image: Optional[str] = None
    likes: int = 0
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None
    group_name: Optional[str] = None

    @property
    def is_group_scoped(self) -> bool:
        return self.group_id is not None


@dataclass
class Comment:
    id: int
    post_id: int
    author_id: int
    content: str
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None


@dataclass
class Message:
    """Direct message between two users"""
    id: int
    sender_id: int
    receiver_id: int
    content: str
    created_at: Optional[datetime] = None
    sender_name: Optional[str] = None


def resolve_audience(
    group_id: Union[int, str, None], is_public: bool = False
) -> Tuple[Optional[int], bool]:
    """
    Decide where a new post lives

    Args:
        group_id: A group id, the "public" marker, or None
        is_public: Explicit public flag; wins over any group

    Returns:
        Tuple of (group_id, is_public) satisfying the exclusivity rule
    """
    if is_public or group_id == PUBLIC_AUDIENCE:
        return None, True
    if group_id is None or group_id == "":
        return None, False
    if isinstance(group_id, bool):
        raise ValidationError("Invalid group id", field="group_id")
    try:
        return int(group_id), False
    except (TypeError, ValueError):
        raise ValidationError(
            f"Group id must be an integer or '{PUBLIC_AUDIENCE}'", field="group_id"
        )
