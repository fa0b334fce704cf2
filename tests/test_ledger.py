"""
Test the message request ledger.

This test suite verifies:
1. At most one pending request per ordered pair of users
2. Accepting opens exactly one conversation with zeroed counters and a greeting
3. Only the recipient responds, only the sender cancels
4. Every transition requires the request to still be pending
5. Blocking records the block without restricting later requests
"""
import pytest
from pydantic import ValidationError
from sqlalchemy import update

from skillswap.core.database import MessageRequest
from skillswap.core.dto import RequestStatus, NotificationType
from skillswap.core.errors import Unauthorized, InvalidTransition, DuplicatePending, NotFound, InvalidPayload
from skillswap.services.ledger import ACCEPT_GREETING

pytestmark = pytest.mark.asyncio


async def test_send_request_creates_pending_and_notifies(ledger, fanout, users):
    """A new request is pending, visible to the recipient and announced to them."""
    request = await ledger.send_request("alice", "bob", "  can you teach me guitar?  ")

    assert request.status == RequestStatus.PENDING
    assert request.message == "can you teach me guitar?"
    assert request.from_user_name == "Alice"
    assert request.to_user_name == "Bob"
    assert request.is_hidden is False

    incoming = await ledger.incoming("bob")
    assert [r.id for r in incoming] == [request.id]
    assert [r.id for r in await ledger.outgoing("alice")] == [request.id]

    notifications = await fanout.list_for_user("bob")
    assert len(notifications) == 1
    assert notifications[0].type == NotificationType.MESSAGE_REQUEST.value
    assert notifications[0].data["fromUserId"] == "alice"
    assert notifications[0].data["requestMessage"] == "can you teach me guitar?"


async def test_sender_name_falls_back_to_email(ledger, users):
    request = await ledger.send_request("carol", "alice", "hello")
    assert request.from_user_name == "carol"


async def test_duplicate_pending_request_rejected(ledger, users):
    await ledger.send_request("alice", "bob", "hi")

    with pytest.raises(DuplicatePending):
        await ledger.send_request("alice", "bob", "hi again")

    assert len(await ledger.incoming("bob")) == 1


async def test_reverse_direction_is_a_different_pair(ledger, users):
    await ledger.send_request("alice", "bob", "hi")
    reverse = await ledger.send_request("bob", "alice", "hi back")

    assert reverse.status == RequestStatus.PENDING
    assert len(await ledger.incoming("alice")) == 1


async def test_partial_index_rejects_second_pending_row(request_gateway, users):
    """The storage layer itself refuses a second pending row for the same pair."""
    await request_gateway.create_request("alice", "bob", "Alice", "Bob", "one")

    with pytest.raises(DuplicatePending):
        await request_gateway.create_request("alice", "bob", "Alice", "Bob", "two")


async def test_send_request_validation(ledger, users):
    with pytest.raises(InvalidPayload):
        await ledger.send_request("alice", "bob", "   ")
    with pytest.raises(InvalidPayload):
        await ledger.send_request("alice", "bob", "x" * 501)
    with pytest.raises(InvalidTransition):
        await ledger.send_request("alice", "alice", "talking to myself")
    with pytest.raises(NotFound):
        await ledger.send_request("alice", "nobody", "hi")


async def test_accept_creates_single_conversation(ledger, store, stream, fanout, users):
    """Accepting opens one conversation with zeroed counters and the greeting from the recipient."""
    request = await ledger.send_request("alice", "bob", "hi")

    conversation_id = await ledger.accept(request.id, "bob")

    conversation = await store.get(conversation_id)
    assert sorted(conversation.participants) == ["alice", "bob"]
    assert conversation.unread_count == {"alice": 0, "bob": 0}
    assert conversation.is_pinned == {"alice": False, "bob": False}
    assert conversation.theme == "default"

    messages = await stream.list_messages(conversation_id, "alice")
    assert len(messages) == 1
    assert messages[0].sender_id == "bob"
    assert messages[0].receiver_id == "alice"
    assert messages[0].content == ACCEPT_GREETING.format(name="Alice")

    outgoing = await ledger.outgoing("alice")
    assert outgoing[0].status == RequestStatus.ACCEPTED
    assert await ledger.incoming("bob") == []

    accepted = [n for n in await fanout.list_for_user("alice") if n.type == NotificationType.MESSAGE_ACCEPTED.value]
    assert len(accepted) == 1
    assert accepted[0].data == {"conversationId": conversation_id}


async def test_accept_twice_creates_no_second_conversation(ledger, store, users):
    request = await ledger.send_request("alice", "bob", "hi")
    await ledger.accept(request.id, "bob")

    with pytest.raises(InvalidTransition):
        await ledger.accept(request.id, "bob")

    assert len(await store.list_for_user("bob")) == 1


async def test_accept_stale_request_in_gateway(request_gateway, ledger, store, users):
    """A second accept racing on a stale copy finds no pending row and changes nothing."""
    request = await ledger.send_request("alice", "bob", "hi")
    stale = await request_gateway.get_request(request.id)

    await request_gateway.accept_request(stale, seed_content="first")
    with pytest.raises(InvalidTransition):
        await request_gateway.accept_request(stale, seed_content="second")

    assert len(await store.list_for_user("alice")) == 1


async def test_only_recipient_may_respond(ledger, users):
    request = await ledger.send_request("alice", "bob", "hi")

    with pytest.raises(Unauthorized):
        await ledger.accept(request.id, "alice")
    with pytest.raises(Unauthorized):
        await ledger.decline(request.id, "carol")
    with pytest.raises(Unauthorized):
        await ledger.block(request.id, "alice")
    with pytest.raises(Unauthorized):
        await ledger.set_hidden(request.id, "alice", True)


async def test_unknown_request(ledger, users):
    with pytest.raises(NotFound):
        await ledger.accept(999, "bob")
    with pytest.raises(NotFound):
        await ledger.cancel(999, "alice")


async def test_decline_notifies_sender_and_allows_new_request(ledger, store, fanout, users):
    request = await ledger.send_request("alice", "bob", "hi")

    declined = await ledger.decline(request.id, "bob")

    assert declined.status == RequestStatus.DECLINED
    assert await store.list_for_user("bob") == []
    types = [n.type for n in await fanout.list_for_user("alice")]
    assert NotificationType.MESSAGE_DECLINED.value in types

    with pytest.raises(InvalidTransition):
        await ledger.accept(request.id, "bob")

    again = await ledger.send_request("alice", "bob", "second try")
    assert again.status == RequestStatus.PENDING


async def test_block_records_block_without_notification(ledger, fanout, users):
    request = await ledger.send_request("alice", "bob", "hi")

    block = await ledger.block(request.id, "bob")

    assert block.user_id == "bob"
    assert block.blocked_user_id == "alice"
    assert block.blocked_user_name == "Alice"
    assert [b.id for b in await ledger.blocked("bob")] == [block.id]
    assert (await ledger.outgoing("alice"))[0].status == RequestStatus.BLOCKED
    assert await fanout.list_for_user("alice") == []


async def test_blocked_sender_can_still_send_requests(ledger, users):
    """A block does not gate new requests from the blocked user."""
    request = await ledger.send_request("alice", "bob", "hi")
    await ledger.block(request.id, "bob")

    again = await ledger.send_request("alice", "bob", "please?")

    assert again.status == RequestStatus.PENDING
    assert [r.id for r in await ledger.incoming("bob")] == [again.id]


async def test_cancel_by_sender(ledger, users):
    request = await ledger.send_request("alice", "bob", "hi")

    with pytest.raises(Unauthorized):
        await ledger.cancel(request.id, "bob")

    await ledger.cancel(request.id, "alice")

    assert await ledger.incoming("bob") == []
    assert await ledger.outgoing("alice") == []


async def test_cancel_after_accept_rejected(ledger, users):
    request = await ledger.send_request("alice", "bob", "hi")
    await ledger.accept(request.id, "bob")

    with pytest.raises(InvalidTransition):
        await ledger.cancel(request.id, "alice")


async def test_hidden_requests_are_partitioned(ledger, users):
    first = await ledger.send_request("alice", "bob", "hi")
    second = await ledger.send_request("carol", "bob", "hey")

    hidden = await ledger.set_hidden(first.id, "bob", True)

    assert hidden.is_hidden is True
    assert [r.id for r in await ledger.incoming("bob")] == [second.id]
    assert [r.id for r in await ledger.incoming("bob", hidden=True)] == [first.id]

    await ledger.set_hidden(first.id, "bob", False)
    assert {r.id for r in await ledger.incoming("bob")} == {first.id, second.id}


async def test_unknown_stored_status_fails_on_read(db_manager, request_gateway, ledger, users):
    """A row carrying a status outside the known set is rejected instead of trusted."""
    request = await ledger.send_request("alice", "bob", "hi")
    async with db_manager.session() as session:
        await session.execute(
            update(MessageRequest).where(MessageRequest.id == request.id).values(status="archived")
        )

    with pytest.raises(ValidationError):
        await request_gateway.get_request(request.id)
