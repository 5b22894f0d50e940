"""Group registry and membership state machine.

Invariants:
    - Join requests start pending; repeats never add a second edge
    - Seeding a pre-created group is idempotent on name
    - Group listings carry the viewer's own status only
"""

import pytest

from campus_service.domain.models import MembershipStatus
from campus_service.errors import ValidationError


async def test_create_group_is_user_created(registry, alice):
    group = await registry.create_group(alice.id, "  Debate Club ")

    assert group.name == "Debate Club"
    assert group.creator_id == alice.id
    assert group.is_pre_created is False


async def test_create_group_requires_name(registry, store, alice):
    with pytest.raises(ValidationError):
        await registry.create_group(alice.id, "")
    assert store.groups == {}


async def test_seed_group_once(registry, alice):
    assert await registry.seed_group("Batch 2023", alice.id) is True
    assert await registry.seed_group("Batch 2023", alice.id) is False

    groups = await registry.list_all()
    assert [(g.name, g.is_pre_created) for g in groups] == [("Batch 2023", True)]
    assert groups[0].creator_name == "Alice"


async def test_user_group_with_seed_name_does_not_block_seed(registry, alice):
    await registry.create_group(alice.id, "Batch 2023")

    assert await registry.seed_group("Batch 2023", alice.id) is True


async def test_join_twice_yields_one_pending_edge(memberships, registry, store, alice, bob):
    group = await registry.create_group(alice.id, "Coding")

    assert await memberships.request_join(bob.id, group.id) is True
    assert await memberships.request_join(bob.id, group.id) is False

    edges = [m for m in store.memberships.values() if m.group_id == group.id]
    assert len(edges) == 1
    assert edges[0].status == MembershipStatus.PENDING


async def test_list_groups_for_viewer_shows_own_status(memberships, registry, alice, bob):
    chess = await registry.create_group(alice.id, "Chess")
    music = await registry.create_group(alice.id, "Music")
    await memberships.request_join(bob.id, chess.id)

    bob_view = {g.id: g for g in await memberships.list_groups_for_viewer(bob.id)}
    alice_view = {g.id: g for g in await memberships.list_groups_for_viewer(alice.id)}

    assert bob_view[chess.id].status == MembershipStatus.PENDING
    assert bob_view[music.id].status is None
    assert alice_view[chess.id].status is None
    assert bob_view[chess.id].creator_name == "Alice"


async def test_roster_lists_requests_in_order(memberships, registry, alice, bob, carol):
    group = await registry.create_group(alice.id, "Hiking")
    await memberships.request_join(carol.id, group.id)
    await memberships.request_join(bob.id, group.id)

    roster = await memberships.list_roster(group.id)
    assert [(r.name, r.status) for r in roster] == [
        ("Carol", MembershipStatus.PENDING),
        ("Bob", MembershipStatus.PENDING),
    ]


async def test_access_policy_keeps_follow_and_membership_apart(
    memberships, relationships, registry, store, alice, bob,
):
    joined = await registry.create_group(alice.id, "Joined")
    followed = await registry.create_group(alice.id, "Followed")

    await memberships.request_join(bob.id, joined.id)
    store.memberships[(joined.id, bob.id)].status = MembershipStatus.APPROVED
    await relationships.follow(bob.id, followed.id, "group")

    policy = await memberships.access_policy(bob.id)

    assert policy.is_approved_member(joined.id)
    assert not policy.can_read_group_posts(joined.id)
    assert policy.can_read_group_posts(followed.id)
    assert not policy.is_approved_member(followed.id)
