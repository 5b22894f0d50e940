"""
Storage backends and the repository bundle handed to services
"""
from dataclasses import dataclass
from typing import Optional

from ..database import Database
from ..domain.repositories import (
    IFollowRepository,
    IGroupRepository,
    IMembershipRepository,
    IMessageRepository,
    IPostRepository,
    IUserRepository,
)
from .database.repositories import (
    FollowRepository,
    GroupRepository,
    MembershipRepository,
    MessageRepository,
    PostRepository,
    UserRepository,
)
from .memory.repositories import (
    InMemoryFollowRepository,
    InMemoryGroupRepository,
    InMemoryMembershipRepository,
    InMemoryMessageRepository,
    InMemoryPostRepository,
    InMemoryStore,
    InMemoryUserRepository,
)


@dataclass
class Repositories:
    users: IUserRepository
    groups: IGroupRepository
    memberships: IMembershipRepository
    follows: IFollowRepository
    posts: IPostRepository
    messages: IMessageRepository


def postgres_repositories(db: Database) -> Repositories:
    """Repositories backed by the asyncpg pool"""
    return Repositories(
        users=UserRepository(db),
        groups=GroupRepository(db),
        memberships=MembershipRepository(db),
        follows=FollowRepository(db),
        posts=PostRepository(db),
        messages=MessageRepository(db),
    )


def memory_repositories(store: Optional[InMemoryStore] = None) -> Repositories:
    """Repositories sharing one in-process store"""
    store = store or InMemoryStore()
    return Repositories(
        users=InMemoryUserRepository(store),
        groups=InMemoryGroupRepository(store),
        memberships=InMemoryMembershipRepository(store),
        follows=InMemoryFollowRepository(store),
        posts=InMemoryPostRepository(store),
        messages=InMemoryMessageRepository(store),
    )


__all__ = [
    "Repositories",
    "postgres_repositories",
    "memory_repositories",
    "InMemoryStore",
]
