"""
Repository implementations - PostgreSQL data access layer
"""
from typing import Any, Dict, List, Optional, Set

from ...database import Database, affected_rows
from ...domain.models import (
    Comment,
    FollowType,
    Group,
    GroupListing,
    MembershipStatus,
    Message,
    Post,
    RosterEntry,
    User,
    UserSummary,
    WriteResult,
)
from ...domain.repositories import (
    IFollowRepository,
    IGroupRepository,
    IMembershipRepository,
    IMessageRepository,
    IPostRepository,
    IUserRepository,
)

USER_COLUMNS = "id, email, name, course, batch, bio, profile_pic, created_at"

POST_SELECT = """
    SELECT p.id, p.author_id, p.group_id, p.content, p.image, p.is_public,
           p.likes, p.created_at, u.name AS author_name, g.name AS group_name
    FROM posts p
    LEFT JOIN users u ON u.id = p.author_id
    LEFT JOIN groups g ON g.id = p.group_id
"""

# One statement: the follow sets and the posts come from the same snapshot.
FEED_QUERY = POST_SELECT + """
    WHERE p.is_public
       OR p.author_id IN (
            SELECT target_id FROM follows WHERE follower_id = $1 AND type = 'user'
       )
       OR p.group_id IN (
            SELECT target_id FROM follows WHERE follower_id = $1 AND type = 'group'
       )
    ORDER BY p.created_at DESC, p.id ASC
"""


class UserRepository(IUserRepository):
    """User repository implementation using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    def _row_to_user(self, row: Optional[Dict[str, Any]]) -> Optional[User]:
        if not row:
            return None
        return User(**row)

    async def create_if_absent(
        self,
        email: str,
        name: str,
        course: Optional[str] = None,
        batch: Optional[str] = None,
        bio: str = "",
    ) -> bool:
        status_tag = await self.db.execute(
            """
            INSERT INTO users (email, name, course, batch, bio)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (email) DO NOTHING
            """,
            email, name, course, batch, bio
        )
        return affected_rows(status_tag) > 0

    async def find_by_id(self, user_id: int) -> Optional[User]:
        row = await self.db.fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id
        )
        return self._row_to_user(row)

    async def find_by_email(self, email: str) -> Optional[User]:
        row = await self.db.fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = $1", email
        )
        return self._row_to_user(row)

    async def update_profile(
        self, user_id: int, bio: str, profile_pic: Optional[str]
    ) -> WriteResult:
        status_tag = await self.db.execute(
            """
            UPDATE users
            SET bio = $1, profile_pic = COALESCE($2, profile_pic)
            WHERE id = $3
            """,
            bio, profile_pic, user_id
        )
        return WriteResult.from_count(affected_rows(status_tag))

    async def list_others(self, viewer_id: int) -> List[UserSummary]:
        rows = await self.db.fetch_all(
            "SELECT id, name FROM users WHERE id != $1 ORDER BY id",
            viewer_id
        )
        return [UserSummary(**row) for row in rows]


class GroupRepository(IGroupRepository):
    """Group registry implementation using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    async def create(self, name: str, creator_id: int) -> Group:
        row = await self.db.fetch_one(
            """
            INSERT INTO groups (name, creator_id, is_pre_created)
            VALUES ($1, $2, FALSE)
            RETURNING id, name, creator_id, is_pre_created, created_at
            """,
            name, creator_id
        )
        return Group(**row)

    async def seed(self, name: str, creator_id: Optional[int]) -> bool:
        status_tag = await self.db.execute(
            """
            INSERT INTO groups (name, creator_id, is_pre_created)
            VALUES ($1, $2, TRUE)
            ON CONFLICT (name) WHERE is_pre_created DO NOTHING
            """,
            name, creator_id
        )
        return affected_rows(status_tag) > 0

    async def list_all(self) -> List[Group]:
        rows = await self.db.fetch_all(
            """
            SELECT g.id, g.name, g.creator_id, g.is_pre_created, g.created_at,
                   u.name AS creator_name
            FROM groups g
            LEFT JOIN users u ON u.id = g.creator_id
            ORDER BY g.id
            """
        )
        return [Group(**row) for row in rows]

    async def list_for_viewer(self, viewer_id: int) -> List[GroupListing]:
        rows = await self.db.fetch_all(
            """
            SELECT g.id, g.name, g.creator_id, g.is_pre_created,
                   u.name AS creator_name, gm.status
            FROM groups g
            LEFT JOIN users u ON u.id = g.creator_id
            LEFT JOIN group_members gm ON gm.group_id = g.id AND gm.user_id = $1
            ORDER BY g.id
            """,
            viewer_id
        )
        listings = []
        for row in rows:
            if row["status"] is not None:
                row["status"] = MembershipStatus(row["status"])
            listings.append(GroupListing(**row))
        return listings


class MembershipRepository(IMembershipRepository):
    """Membership edges using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    async def request_join(self, group_id: int, user_id: int) -> bool:
        status_tag = await self.db.execute(
            """
            INSERT INTO group_members (group_id, user_id, status)
            VALUES ($1, $2, 'pending')
            ON CONFLICT (group_id, user_id) DO NOTHING
            """,
            group_id, user_id
        )
        return affected_rows(status_tag) > 0

    async def list_roster(self, group_id: int) -> List[RosterEntry]:
        rows = await self.db.fetch_all(
            """
            SELECT gm.user_id, u.name, gm.status, gm.created_at AS requested_at
            FROM group_members gm
            LEFT JOIN users u ON u.id = gm.user_id
            WHERE gm.group_id = $1
            ORDER BY gm.created_at ASC, gm.id ASC
            """,
            group_id
        )
        entries = []
        for row in rows:
            row["status"] = MembershipStatus(row["status"])
            entries.append(RosterEntry(**row))
        return entries

    async def approved_group_ids(self, user_id: int) -> Set[int]:
        rows = await self.db.fetch_all(
            "SELECT group_id FROM group_members WHERE user_id = $1 AND status = 'approved'",
            user_id
        )
        return {row["group_id"] for row in rows}


class FollowRepository(IFollowRepository):
    """Relationship graph using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    async def follow(
        self, follower_id: int, target_id: int, follow_type: FollowType
    ) -> bool:
        status_tag = await self.db.execute(
            """
            INSERT INTO follows (follower_id, target_id, type)
            VALUES ($1, $2, $3)
            ON CONFLICT (follower_id, target_id, type) DO NOTHING
            """,
            follower_id, target_id, follow_type.value
        )
        return affected_rows(status_tag) > 0

    async def followed_ids(self, follower_id: int, follow_type: FollowType) -> Set[int]:
        rows = await self.db.fetch_all(
            "SELECT target_id FROM follows WHERE follower_id = $1 AND type = $2",
            follower_id, follow_type.value
        )
        return {row["target_id"] for row in rows}


class PostRepository(IPostRepository):
    """Posts, likes and comments using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        author_id: int,
        content: str,
        image: Optional[str],
        group_id: Optional[int],
        is_public: bool,
    ) -> Post:
        row = await self.db.fetch_one(
            """
            INSERT INTO posts (author_id, group_id, content, image, is_public)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id, author_id, group_id, content, image, is_public, likes, created_at
            """,
            author_id, group_id, content, image, is_public
        )
        return Post(**row)

    async def find_by_id(self, post_id: int) -> Optional[Post]:
        row = await self.db.fetch_one(POST_SELECT + " WHERE p.id = $1", post_id)
        return Post(**row) if row else None

    async def list_visible(self, viewer_id: int) -> List[Post]:
        rows = await self.db.fetch_all(FEED_QUERY, viewer_id)
        return [Post(**row) for row in rows]

    async def increment_like(self, post_id: int) -> WriteResult:
        status_tag = await self.db.execute(
            "UPDATE posts SET likes = likes + 1 WHERE id = $1", post_id
        )
        return WriteResult.from_count(affected_rows(status_tag))

    async def add_comment(self, post_id: int, author_id: int, content: str) -> WriteResult:
        status_tag = await self.db.execute(
            """
            INSERT INTO comments (post_id, author_id, content)
            SELECT $1, $2, $3
            WHERE EXISTS (SELECT 1 FROM posts WHERE id = $1)
            """,
            post_id, author_id, content
        )
        return WriteResult.from_count(affected_rows(status_tag))

    async def list_comments(self, post_id: int) -> List[Comment]:
        rows = await self.db.fetch_all(
            """
            SELECT c.id, c.post_id, c.author_id, c.content, c.created_at,
                   u.name AS author_name
            FROM comments c
            LEFT JOIN users u ON u.id = c.author_id
            WHERE c.post_id = $1
            ORDER BY c.created_at ASC, c.id ASC
            """,
            post_id
        )
        return [Comment(**row) for row in rows]


class MessageRepository(IMessageRepository):
    """Messaging thread using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    async def create(self, sender_id: int, receiver_id: int, content: str) -> Message:
        row = await self.db.fetch_one(
            """
            INSERT INTO messages (sender_id, receiver_id, content)
            VALUES ($1, $2, $3)
            RETURNING id, sender_id, receiver_id, content, created_at
            """,
            sender_id, receiver_id, content
        )
        return Message(**row)

    async def list_thread(self, user_id: int, other_user_id: int) -> List[Message]:
        rows = await self.db.fetch_all(
            """
            SELECT m.id, m.sender_id, m.receiver_id, m.content, m.created_at,
                   u.name AS sender_name
            FROM messages m
            LEFT JOIN users u ON u.id = m.sender_id
            WHERE (m.sender_id = $1 AND m.receiver_id = $2)
               OR (m.sender_id = $2 AND m.receiver_id = $1)
            ORDER BY m.created_at ASC, m.id ASC
            """,
            user_id, other_user_id
        )
        return [Message(**row) for row in rows]
