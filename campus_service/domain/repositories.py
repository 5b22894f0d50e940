"""
Repository interfaces - Define contracts for data access

Every method maps to one store statement so that concurrent callers only
ever observe whole writes.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from .models import (
    Comment,
    FollowType,
    Group,
    GroupListing,
    Message,
    Post,
    RosterEntry,
    User,
    UserSummary,
    WriteResult,
)


class IUserRepository(ABC):
    """User repository interface"""

    @abstractmethod
    async def create_if_absent(
        self,
        email: str,
        name: str,
        course: Optional[str] = None,
        batch: Optional[str] = None,
        bio: str = "",
    ) -> bool:
        """Insert a user unless the email exists. Returns True if inserted."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        """Find user by ID"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email"""
        pass

    @abstractmethod
    async def update_profile(
        self, user_id: int, bio: str, profile_pic: Optional[str]
    ) -> WriteResult:
        """Replace bio; replace profile picture only when one is given"""
        pass

    @abstractmethod
    async def list_others(self, viewer_id: int) -> List[UserSummary]:
        """Every user except the viewer, by id"""
        pass


class IGroupRepository(ABC):
    """Group registry interface"""

    @abstractmethod
    async def create(self, name: str, creator_id: int) -> Group:
        """Create a user-made group"""
        pass

    @abstractmethod
    async def seed(self, name: str, creator_id: Optional[int]) -> bool:
        """Create a pre-created group unless one with that name exists"""
        pass

    @abstractmethod
    async def list_all(self) -> List[Group]:
        """Every group, by id"""
        pass

    @abstractmethod
    async def list_for_viewer(self, viewer_id: int) -> List[GroupListing]:
        """Every group annotated with the viewer's membership status"""
        pass


class IMembershipRepository(ABC):
    """Membership edge interface"""

    @abstractmethod
    async def request_join(self, group_id: int, user_id: int) -> bool:
        """Insert a pending edge unless one exists. Returns True if inserted."""
        pass

    @abstractmethod
    async def list_roster(self, group_id: int) -> List[RosterEntry]:
        """Members of a group, oldest request first"""
        pass

    @abstractmethod
    async def approved_group_ids(self, user_id: int) -> Set[int]:
        """Groups where the user's membership is approved"""
        pass


class IFollowRepository(ABC):
    """Relationship graph interface"""

    @abstractmethod
    async def follow(
        self, follower_id: int, target_id: int, follow_type: FollowType
    ) -> bool:
        """Insert an edge unless it exists. Returns True if inserted."""
        pass

    @abstractmethod
    async def followed_ids(self, follower_id: int, follow_type: FollowType) -> Set[int]:
        """Targets of the given type followed by the user"""
        pass


class IPostRepository(ABC):
    """Content store interface: posts, likes and comments"""

    @abstractmethod
    async def create(
        self,
        author_id: int,
        content: str,
        image: Optional[str],
        group_id: Optional[int],
        is_public: bool,
    ) -> Post:
        """Insert a post"""
        pass

    @abstractmethod
    async def find_by_id(self, post_id: int) -> Optional[Post]:
        """Find post by ID"""
        pass

    @abstractmethod
    async def list_visible(self, viewer_id: int) -> List[Post]:
        """Posts the viewer may see, newest first, in one snapshot"""
        pass

    @abstractmethod
    async def increment_like(self, post_id: int) -> WriteResult:
        """Atomically add one like"""
        pass

    @abstractmethod
    async def add_comment(self, post_id: int, author_id: int, content: str) -> WriteResult:
        """Append a comment if the post exists"""
        pass

    @abstractmethod
    async def list_comments(self, post_id: int) -> List[Comment]:
        """Comments on a post, oldest first"""
        pass


class IMessageRepository(ABC):
    """Messaging thread interface"""

    @abstractmethod
    async def create(self, sender_id: int, receiver_id: int, content: str) -> Message:
        """Append a message"""
        pass

    @abstractmethod
    async def list_thread(self, user_id: int, other_user_id: int) -> List[Message]:
        """Messages between two users in either direction, oldest first"""
        pass
