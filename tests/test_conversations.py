"""
Test the conversation store: per-participant counters and pins, the shared
theme and the joined per-user listing.
"""
import pytest

from skillswap.core.dto import UserDTO
from skillswap.core.errors import Unauthorized, NotFound, InvalidPayload
from skillswap.services.views import filter_conversations

pytestmark = pytest.mark.asyncio


async def test_append_unread_only_touches_one_participant(store, conversation_id):
    assert await store.append_unread(conversation_id, "alice") == 1
    assert await store.append_unread(conversation_id, "alice", 2) == 3

    conversation = await store.get(conversation_id)
    assert conversation.unread_count == {"alice": 3, "bob": 0}


async def test_reset_unread_is_idempotent(store, conversation_id):
    await store.append_unread(conversation_id, "bob", 4)

    await store.reset_unread(conversation_id, "bob")
    await store.reset_unread(conversation_id, "bob")

    conversation = await store.get(conversation_id)
    assert conversation.unread_count["bob"] == 0


async def test_counters_reject_non_participants(store, conversation_id):
    with pytest.raises(Unauthorized):
        await store.append_unread(conversation_id, "carol")
    with pytest.raises(Unauthorized):
        await store.reset_unread(conversation_id, "carol")
    with pytest.raises(Unauthorized):
        await store.toggle_pin(conversation_id, "carol")


async def test_unknown_conversation(store, users):
    with pytest.raises(NotFound):
        await store.get(404)
    with pytest.raises(NotFound):
        await store.append_unread(404, "alice")
    with pytest.raises(NotFound):
        await store.reset_unread(404, "alice")


async def test_toggle_pin_is_per_user(store, conversation_id):
    assert await store.toggle_pin(conversation_id, "alice") is True

    conversation = await store.get(conversation_id)
    assert conversation.is_pinned == {"alice": True, "bob": False}

    assert await store.toggle_pin(conversation_id, "alice") is False


async def test_theme_is_shared(store, conversation_id):
    await store.set_theme(conversation_id, "alice", "purple")

    assert (await store.get_for_user(conversation_id, "bob")).theme == "purple"

    with pytest.raises(InvalidPayload):
        await store.set_theme(conversation_id, "alice", "neon")
    with pytest.raises(Unauthorized):
        await store.set_theme(conversation_id, "carol", "dark")


async def test_list_for_user_joins_profiles(store, conversation_id):
    """Each participant sees the other side's profile and only their own counter."""
    await store.append_unread(conversation_id, "alice", 2)

    alice_view = await store.list_for_user("alice")
    bob_view = await store.list_for_user("bob")

    assert len(alice_view) == 1
    assert alice_view[0].other_user.id == "bob"
    assert alice_view[0].other_user.name == "Bob"
    assert alice_view[0].unread_count == 2
    assert bob_view[0].other_user.name == "Alice"
    assert bob_view[0].unread_count == 0
    assert await store.list_for_user("carol") == []


async def test_list_for_user_unknown_profile(ledger, store, users):
    """A counterpart without a directory profile is shown as Unknown."""
    request = await ledger.send_request("ghost", "alice", "hi")
    assert request.from_user_name == "Unknown"
    conversation_id = await ledger.accept(request.id, "alice")

    views = await store.list_for_user("alice")

    assert views[0].id == conversation_id
    assert views[0].other_user == UserDTO(id="ghost", name="Unknown")
    assert (await store.get_for_user(conversation_id, "ghost")).other_user.name == "Alice"


async def test_counterpart_name_falls_back_to_email(ledger, store, users):
    """carol has no name in the directory; her views show the e-mail local part."""
    request = await ledger.send_request("carol", "bob", "hey")
    conversation_id = await ledger.accept(request.id, "bob")

    view = await store.get_for_user(conversation_id, "bob")
    assert view.other_user.name == "carol"
    assert view.other_user.email == "carol@uni.edu"

    views = await store.list_for_user("bob")
    assert [v.id for v in filter_conversations(views, search="carol")] == [conversation_id]


async def test_list_orders_by_recent_activity(ledger, store, stream, users):
    first = await ledger.send_request("alice", "bob", "hi")
    first_id = await ledger.accept(first.id, "bob")
    second = await ledger.send_request("carol", "bob", "hey")
    second_id = await ledger.accept(second.id, "bob")

    await stream.send(first_id, "alice", "bumping this one")

    views = await store.list_for_user("bob")
    assert [v.id for v in views] == [first_id, second_id]
    assert views[0].last_message == "bumping this one"


async def test_open_resets_counter_and_marks_read(store, stream, conversation_id):
    await stream.send(conversation_id, "alice", "one")
    await stream.send(conversation_id, "alice", "two")

    marked = await store.open(conversation_id, "bob")

    assert marked == 2
    assert (await store.get(conversation_id)).unread_count["bob"] == 0
    messages = await stream.list_messages(conversation_id, "bob")
    assert all(m.read for m in messages if m.receiver_id == "bob")
    # alice has not opened the conversation; the greeting addressed to her stays unread
    assert not any(m.read for m in messages if m.receiver_id == "alice")
