"""
Repository implementations - in-process store

Selected with STORAGE_BACKEND=memory. Each repository method runs without
awaiting in between, so on one event loop every call is atomic.
"""
from dataclasses import replace
from datetime import datetime
from itertools import count
from typing import Callable, Dict, List, Optional, Set, Tuple

from ...domain.models import (
    Comment,
    Follow,
    FollowType,
    Group,
    GroupListing,
    Membership,
    MembershipStatus,
    Message,
    Post,
    RosterEntry,
    User,
    UserSummary,
    WriteResult,
)
from ...domain.policies import GroupAccessPolicy, VisibilityPolicy, feed_order
from ...domain.repositories import (
    IFollowRepository,
    IGroupRepository,
    IMembershipRepository,
    IMessageRepository,
    IPostRepository,
    IUserRepository,
)


class InMemoryStore:
    """Tables held as dicts keyed by auto-assigned ids"""

    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow):
        self.clock = clock
        self.users: Dict[int, User] = {}
        self.groups: Dict[int, Group] = {}
        self.memberships: Dict[Tuple[int, int], Membership] = {}
        self.follows: Dict[Tuple[int, int, FollowType], Follow] = {}
        self.posts: Dict[int, Post] = {}
        self.comments: List[Comment] = []
        self.messages: List[Message] = []
        self._sequences: Dict[str, count] = {}

    def next_id(self, table: str) -> int:
        if table not in self._sequences:
            self._sequences[table] = count(1)
        return next(self._sequences[table])

    def user_name(self, user_id: Optional[int]) -> Optional[str]:
        user = self.users.get(user_id)
        return user.name if user else None

    def group_name(self, group_id: Optional[int]) -> Optional[str]:
        group = self.groups.get(group_id)
        return group.name if group else None


class InMemoryUserRepository(IUserRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create_if_absent(
        self,
        email: str,
        name: str,
        course: Optional[str] = None,
        batch: Optional[str] = None,
        bio: str = "",
    ) -> bool:
        if any(user.email == email for user in self.store.users.values()):
            return False
        user_id = self.store.next_id("users")
        self.store.users[user_id] = User(
            id=user_id,
            email=email,
            name=name,
            course=course,
            batch=batch,
            bio=bio,
            created_at=self.store.clock(),
        )
        return True

    async def find_by_id(self, user_id: int) -> Optional[User]:
        user = self.store.users.get(user_id)
        return replace(user) if user else None

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self.store.users.values():
            if user.email == email:
                return replace(user)
        return None

    async def update_profile(
        self, user_id: int, bio: str, profile_pic: Optional[str]
    ) -> WriteResult:
        user = self.store.users.get(user_id)
        if not user:
            return WriteResult.NOT_FOUND
        user.bio = bio
        if profile_pic is not None:
            user.profile_pic = profile_pic
        return WriteResult.APPLIED

    async def list_others(self, viewer_id: int) -> List[UserSummary]:
        return [
            UserSummary(id=user.id, name=user.name)
            for user_id, user in sorted(self.store.users.items())
            if user_id != viewer_id
        ]


class InMemoryGroupRepository(IGroupRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    def _insert(self, name: str, creator_id: Optional[int], is_pre_created: bool) -> Group:
        group_id = self.store.next_id("groups")
        group = Group(
            id=group_id,
            name=name,
            creator_id=creator_id,
            is_pre_created=is_pre_created,
            created_at=self.store.clock(),
        )
        self.store.groups[group_id] = group
        return group

    async def create(self, name: str, creator_id: int) -> Group:
        return replace(self._insert(name, creator_id, False))

    async def seed(self, name: str, creator_id: Optional[int]) -> bool:
        for group in self.store.groups.values():
            if group.is_pre_created and group.name == name:
                return False
        self._insert(name, creator_id, True)
        return True

    async def list_all(self) -> List[Group]:
        return [
            replace(group, creator_name=self.store.user_name(group.creator_id))
            for _, group in sorted(self.store.groups.items())
        ]

    async def list_for_viewer(self, viewer_id: int) -> List[GroupListing]:
        listings = []
        for group_id, group in sorted(self.store.groups.items()):
            membership = self.store.memberships.get((group_id, viewer_id))
            listings.append(GroupListing(
                id=group.id,
                name=group.name,
                creator_id=group.creator_id,
                is_pre_created=group.is_pre_created,
                creator_name=self.store.user_name(group.creator_id),
                status=membership.status if membership else None,
            ))
        return listings


class InMemoryMembershipRepository(IMembershipRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def request_join(self, group_id: int, user_id: int) -> bool:
        key = (group_id, user_id)
        if key in self.store.memberships:
            return False
        self.store.memberships[key] = Membership(
            id=self.store.next_id("group_members"),
            group_id=group_id,
            user_id=user_id,
            status=MembershipStatus.PENDING,
            created_at=self.store.clock(),
        )
        return True

    async def list_roster(self, group_id: int) -> List[RosterEntry]:
        members = [m for m in self.store.memberships.values() if m.group_id == group_id]
        members.sort(key=lambda m: (m.created_at, m.id))
        return [
            RosterEntry(
                user_id=m.user_id,
                name=self.store.user_name(m.user_id),
                status=m.status,
                requested_at=m.created_at,
            )
            for m in members
        ]

    async def approved_group_ids(self, user_id: int) -> Set[int]:
        return {
            m.group_id
            for m in self.store.memberships.values()
            if m.user_id == user_id and m.is_approved()
        }


class InMemoryFollowRepository(IFollowRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def follow(
        self, follower_id: int, target_id: int, follow_type: FollowType
    ) -> bool:
        key = (follower_id, target_id, follow_type)
        if key in self.store.follows:
            return False
        self.store.follows[key] = Follow(
            id=self.store.next_id("follows"),
            follower_id=follower_id,
            target_id=target_id,
            type=follow_type,
            created_at=self.store.clock(),
        )
        return True

    async def followed_ids(self, follower_id: int, follow_type: FollowType) -> Set[int]:
        return {
            edge.target_id
            for edge in self.store.follows.values()
            if edge.follower_id == follower_id and edge.type == follow_type
        }


class InMemoryPostRepository(IPostRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    def _enrich(self, post: Post) -> Post:
        return replace(
            post,
            author_name=self.store.user_name(post.author_id),
            group_name=self.store.group_name(post.group_id),
        )

    def _policy_for(self, viewer_id: int) -> VisibilityPolicy:
        followed_users = set()
        followed_groups = set()
        for edge in self.store.follows.values():
            if edge.follower_id != viewer_id:
                continue
            if edge.type == FollowType.USER:
                followed_users.add(edge.target_id)
            else:
                followed_groups.add(edge.target_id)
        return VisibilityPolicy(
            viewer_id=viewer_id,
            followed_user_ids=frozenset(followed_users),
            group_access=GroupAccessPolicy(followed_group_ids=frozenset(followed_groups)),
        )

    async def create(
        self,
        author_id: int,
        content: str,
        image: Optional[str],
        group_id: Optional[int],
        is_public: bool,
    ) -> Post:
        post_id = self.store.next_id("posts")
        post = Post(
            id=post_id,
            author_id=author_id,
            group_id=group_id,
            content=content,
            image=image,
            is_public=is_public,
            likes=0,
            created_at=self.store.clock(),
        )
        self.store.posts[post_id] = post
        return replace(post)

    async def find_by_id(self, post_id: int) -> Optional[Post]:
        post = self.store.posts.get(post_id)
        return self._enrich(post) if post else None

    async def list_visible(self, viewer_id: int) -> List[Post]:
        policy = self._policy_for(viewer_id)
        visible = [
            self._enrich(post) for post in self.store.posts.values() if policy.can_see(post)
        ]
        return feed_order(visible)

    async def increment_like(self, post_id: int) -> WriteResult:
        post = self.store.posts.get(post_id)
        if not post:
            return WriteResult.NOT_FOUND
        post.likes += 1
        return WriteResult.APPLIED

    async def add_comment(self, post_id: int, author_id: int, content: str) -> WriteResult:
        if post_id not in self.store.posts:
            return WriteResult.NOT_FOUND
        self.store.comments.append(Comment(
            id=self.store.next_id("comments"),
            post_id=post_id,
            author_id=author_id,
            content=content,
            created_at=self.store.clock(),
        ))
        return WriteResult.APPLIED

    async def list_comments(self, post_id: int) -> List[Comment]:
        comments = [c for c in self.store.comments if c.post_id == post_id]
        comments.sort(key=lambda c: (c.created_at, c.id))
        return [
            replace(c, author_name=self.store.user_name(c.author_id)) for c in comments
        ]


class InMemoryMessageRepository(IMessageRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, sender_id: int, receiver_id: int, content: str) -> Message:
        message = Message(
            id=self.store.next_id("messages"),
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            created_at=self.store.clock(),
        )
        self.store.messages.append(message)
        return replace(message)

    async def list_thread(self, user_id: int, other_user_id: int) -> List[Message]:
        pair = {(user_id, other_user_id), (other_user_id, user_id)}
        thread = [m for m in self.store.messages if (m.sender_id, m.receiver_id) in pair]
        thread.sort(key=lambda m: (m.created_at, m.id))
        return [replace(m, sender_name=self.store.user_name(m.sender_id)) for m in thread]
