"""Messaging thread: validation before write, oldest-first transcript."""

import pytest

from campus_service.errors import ValidationError


async def test_missing_receiver_rejected(messaging, store, alice):
    with pytest.raises(ValidationError) as exc_info:
        await messaging.send(alice.id, None, "hi")
    assert exc_info.value.field == "receiver_id"
    assert store.messages == []


@pytest.mark.parametrize("content", [None, "", "   "])
async def test_missing_content_rejected(messaging, store, alice, bob, content):
    with pytest.raises(ValidationError) as exc_info:
        await messaging.send(alice.id, bob.id, content)
    assert exc_info.value.field == "content"
    assert store.messages == []


async def test_thread_is_oldest_first_both_directions(messaging, alice, bob, carol):
    await messaging.send(alice.id, bob.id, "hey bob")
    await messaging.send(bob.id, alice.id, "hey alice")
    await messaging.send(alice.id, carol.id, "not in this thread")
    await messaging.send(alice.id, bob.id, "lunch?")

    thread = await messaging.list_thread(alice.id, bob.id)
    assert [m.content for m in thread] == ["hey bob", "hey alice", "lunch?"]
    assert [m.sender_name for m in thread] == ["Alice", "Bob", "Alice"]

    mirrored = await messaging.list_thread(bob.id, alice.id)
    assert [m.id for m in mirrored] == [m.id for m in thread]


async def test_same_timestamp_messages_keep_send_order(messaging, clock, alice, bob):
    clock.frozen = True
    for text in ("one", "two", "three"):
        await messaging.send(alice.id, bob.id, text)

    thread = await messaging.list_thread(bob.id, alice.id)
    assert [m.content for m in thread] == ["one", "two", "three"]


async def test_receiver_id_zero_is_not_missing(messaging, alice):
    message = await messaging.send(alice.id, 0, "hello")
    assert message.receiver_id == 0
