"""PostgreSQL repositories against a mocked Database.

Checks the statements carry the visibility rule, the idempotency clauses and
the row-count handling; the SQL itself runs only against a real server.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from campus_service.database import Database, affected_rows
from campus_service.domain.models import FollowType, MembershipStatus, WriteResult
from campus_service.infrastructure.database.repositories import (
    FEED_QUERY,
    FollowRepository,
    GroupRepository,
    MembershipRepository,
    MessageRepository,
    PostRepository,
    UserRepository,
)

NOW = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def db():
    mock = MagicMock(spec=Database)
    mock.execute = AsyncMock(return_value="INSERT 0 1")
    mock.fetch_one = AsyncMock(return_value=None)
    mock.fetch_all = AsyncMock(return_value=[])
    return mock


@pytest.mark.parametrize("tag, expected", [
    ("INSERT 0 1", 1),
    ("INSERT 0 0", 0),
    ("UPDATE 3", 3),
    ("", 0),
    (None, 0),
])
def test_affected_rows(tag, expected):
    assert affected_rows(tag) == expected


def test_feed_query_has_three_visibility_branches():
    where = FEED_QUERY.split("WHERE", 1)[1]
    assert "p.is_public" in where
    assert "type = 'user'" in where
    assert "type = 'group'" in where
    assert "group_members" not in FEED_QUERY
    assert "ORDER BY p.created_at DESC, p.id ASC" in FEED_QUERY


async def test_list_visible_passes_viewer(db):
    db.fetch_all.return_value = [{
        "id": 1, "author_id": 2, "group_id": None, "content": "hi", "image": None,
        "is_public": True, "likes": 0, "created_at": NOW,
        "author_name": "Bob", "group_name": None,
    }]

    posts = await PostRepository(db).list_visible(5)

    db.fetch_all.assert_awaited_once_with(FEED_QUERY, 5)
    assert posts[0].author_name == "Bob"


async def test_follow_reports_duplicate(db):
    repo = FollowRepository(db)
    db.execute.return_value = "INSERT 0 0"

    assert await repo.follow(1, 2, FollowType.GROUP) is False

    query, *args = db.execute.await_args.args
    assert "ON CONFLICT (follower_id, target_id, type) DO NOTHING" in query
    assert args == [1, 2, "group"]


async def test_join_request_is_pending_and_idempotent(db):
    assert await MembershipRepository(db).request_join(3, 4) is True

    query, *args = db.execute.await_args.args
    assert "'pending'" in query
    assert "ON CONFLICT (group_id, user_id) DO NOTHING" in query
    assert args == [3, 4]


async def test_seed_group_conflicts_on_pre_created_name(db):
    db.execute.return_value = "INSERT 0 0"

    assert await GroupRepository(db).seed("Batch 2023", 1) is False
    query = db.execute.await_args.args[0]
    assert "ON CONFLICT (name) WHERE is_pre_created DO NOTHING" in query


async def test_like_result_from_row_count(db):
    repo = PostRepository(db)

    db.execute.return_value = "UPDATE 1"
    assert await repo.increment_like(1) == WriteResult.APPLIED

    db.execute.return_value = "UPDATE 0"
    assert await repo.increment_like(99) == WriteResult.NOT_FOUND
    assert "likes = likes + 1" in db.execute.await_args.args[0]


async def test_comment_insert_guarded_by_post_existence(db):
    db.execute.return_value = "INSERT 0 0"

    result = await PostRepository(db).add_comment(99, 1, "hello")

    assert result == WriteResult.NOT_FOUND
    assert "WHERE EXISTS (SELECT 1 FROM posts WHERE id = $1)" in db.execute.await_args.args[0]


async def test_profile_update_coalesces_picture(db):
    db.execute.return_value = "UPDATE 1"

    result = await UserRepository(db).update_profile(1, "bio", None)

    assert result == WriteResult.APPLIED
    query, *args = db.execute.await_args.args
    assert "COALESCE($2, profile_pic)" in query
    assert args == ["bio", None, 1]


async def test_roster_status_is_converted(db):
    db.fetch_all.return_value = [{
        "user_id": 4, "name": "Bob", "status": "approved", "requested_at": NOW,
    }]

    roster = await MembershipRepository(db).list_roster(3)

    assert roster[0].status == MembershipStatus.APPROVED
    assert db.fetch_all.await_args.args[1] == 3


async def test_group_listing_without_membership(db):
    db.fetch_all.return_value = [{
        "id": 1, "name": "Chess", "creator_id": 2, "is_pre_created": False,
        "creator_name": "Bob", "status": None,
    }]

    listings = await GroupRepository(db).list_for_viewer(7)

    assert listings[0].status is None
    assert db.fetch_all.await_args.args[1] == 7


async def test_message_thread_matches_both_directions(db):
    await MessageRepository(db).list_thread(1, 2)

    query, *args = db.fetch_all.await_args.args
    assert "(m.sender_id = $1 AND m.receiver_id = $2)" in query
    assert "(m.sender_id = $2 AND m.receiver_id = $1)" in query
    assert "ORDER BY m.created_at ASC, m.id ASC" in query
    assert args == [1, 2]


async def test_missing_user_returns_none(db):
    assert await UserRepository(db).find_by_id(42) is None
