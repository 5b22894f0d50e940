"""
Access policies - which posts a viewer may read

Group access has two separate predicates. Following a group is what opens
its posts to a viewer; approved membership is tracked on its own and does
not currently gate anything in the feed.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List

from .models import Post


@dataclass(frozen=True)
class GroupAccessPolicy:
    """Per-viewer group capabilities"""
    followed_group_ids: FrozenSet[int] = field(default_factory=frozenset)
    approved_group_ids: FrozenSet[int] = field(default_factory=frozenset)

    def can_read_group_posts(self, group_id: int) -> bool:
        return group_id in self.followed_group_ids

    def is_approved_member(self, group_id: int) -> bool:
        return group_id in self.approved_group_ids


@dataclass(frozen=True)
class VisibilityPolicy:
    """Feed visibility for a single viewer"""
    viewer_id: int
    followed_user_ids: FrozenSet[int] = field(default_factory=frozenset)
    group_access: GroupAccessPolicy = field(default_factory=GroupAccessPolicy)

    def can_see(self, post: Post) -> bool:
        """A post is visible if public, by a followed author, or in a followed group"""
        if post.is_public:
            return True
        if post.author_id in self.followed_user_ids:
            return True
        return post.is_group_scoped and self.group_access.can_read_group_posts(post.group_id)


def feed_order(posts: Iterable[Post]) -> List[Post]:
    """Newest first; equal timestamps fall back to id ascending"""
    ordered = sorted(posts, key=lambda p: p.id)
    ordered.sort(key=lambda p: p.created_at, reverse=True)
    return ordered
