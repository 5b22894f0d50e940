"""User directory and bootstrap seeding."""

import pytest

from campus_service.domain.models import WriteResult
from campus_service.errors import NotFoundError, ValidationError
from campus_service.seed import seed


async def test_profile_update_keeps_picture_when_not_given(users, alice):
    await users.update_profile(alice.id, "new bio", "me.png")
    await users.update_profile(alice.id, "newer bio")

    profile = await users.get_profile(alice.id)
    assert profile.bio == "newer bio"
    assert profile.profile_pic == "me.png"


async def test_default_profile_picture(users, alice):
    profile = await users.get_profile(alice.id)
    assert profile.profile_pic == "default-profile.png"


async def test_update_unknown_user_is_noop(users):
    assert await users.update_profile(77, "bio") == WriteResult.NOT_FOUND


async def test_get_unknown_profile_raises(users):
    with pytest.raises(NotFoundError):
        await users.get_profile(77)


async def test_list_other_users_excludes_viewer(users, alice, bob, carol):
    others = await users.list_other_users(bob.id)
    assert [(u.id, u.name) for u in others] == [(alice.id, "Alice"), (carol.id, "Carol")]


async def test_seeding_twice_is_idempotent(repos, store):
    await seed(repos)
    await seed(repos)

    assert sorted(u.email for u in store.users.values()) == [
        "student1@aimsr.edu",
        "student2@aimsr.edu",
    ]
    batch = [g for g in store.groups.values() if g.name == "Batch 2023"]
    assert len(batch) == 1
    assert batch[0].is_pre_created is True

    owner = await repos.users.find_by_email("student1@aimsr.edu")
    assert batch[0].creator_id == owner.id
    assert owner.bio == "Hey!"


async def test_provision_creates_profile_once(users, store):
    first = await users.provision("new@aimsr.edu", "New Student", "MCA", "2025")
    again = await users.provision("new@aimsr.edu", "Renamed")

    assert again.id == first.id
    assert again.name == "New Student"
    assert again.batch == "2025"
    assert len(store.users) == 1


async def test_provision_returns_existing_user(users, alice):
    user = await users.provision(alice.email, "Someone Else")
    assert user.id == alice.id
    assert user.name == "Alice"


async def test_provision_falls_back_to_email_name(users):
    user = await users.provision("jdoe@aimsr.edu", None)
    assert user.name == "jdoe"


async def test_provision_requires_email(users, store):
    with pytest.raises(ValidationError):
        await users.provision("", "No Email")
    assert store.users == {}
