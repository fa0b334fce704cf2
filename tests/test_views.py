from datetime import datetime, timedelta, timezone

from skillswap.core.dto import MessageRequestDTO, ConversationViewDTO, RequestStatus, UserDTO
from skillswap.services.views import filter_requests, filter_conversations

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_request(request_id: int, name: str, message: str, minutes: int) -> MessageRequestDTO:
    return MessageRequestDTO(
        id=request_id,
        from_user_id=name.lower(),
        to_user_id="bob",
        from_user_name=name,
        to_user_name="Bob",
        message=message,
        status=RequestStatus.PENDING,
        created_at=BASE + timedelta(minutes=minutes),
        is_hidden=False
    )


def make_conversation(conversation_id: int, name: str, unread: int, pinned: bool, last: str = "") -> ConversationViewDTO:
    return ConversationViewDTO(
        id=conversation_id,
        participants=["bob", name.lower()],
        last_message=last,
        last_message_time=BASE,
        unread_count=unread,
        is_pinned=pinned,
        theme="default",
        other_user=UserDTO(id=name.lower(), name=name)
    )


REQUESTS = [
    make_request(1, "Zoe", "calculus help", 0),
    make_request(2, "adam", "guitar lessons", 10),
    make_request(3, "Mia", "Spanish practice", 5),
]


def test_requests_default_newest_first():
    assert [r.id for r in filter_requests(REQUESTS)] == [2, 3, 1]


def test_requests_oldest_and_name():
    assert [r.id for r in filter_requests(REQUESTS, sort_by="oldest")] == [1, 3, 2]
    assert [r.id for r in filter_requests(REQUESTS, sort_by="name")] == [2, 3, 1]


def test_requests_search_matches_name_or_message():
    assert [r.id for r in filter_requests(REQUESTS, search="SPANISH")] == [3]
    assert [r.id for r in filter_requests(REQUESTS, search="zo")] == [1]
    assert filter_requests(REQUESTS, search="chemistry") == []


CONVERSATIONS = [
    make_conversation(1, "Zoe", 0, False, "see you"),
    make_conversation(2, "adam", 5, False),
    make_conversation(3, "Mia", 1, True),
    make_conversation(4, "Lee", 3, True, "thanks!"),
]


def test_conversations_recent_keeps_stored_order():
    assert [c.id for c in filter_conversations(CONVERSATIONS)] == [1, 2, 3, 4]


def test_conversations_sorts():
    assert [c.id for c in filter_conversations(CONVERSATIONS, sort_by="name")] == [2, 4, 3, 1]
    assert [c.id for c in filter_conversations(CONVERSATIONS, sort_by="unread")] == [2, 4, 3, 1]
    assert [c.id for c in filter_conversations(CONVERSATIONS, sort_by="pinned")] == [4, 3, 2, 1]


def test_conversations_search():
    assert [c.id for c in filter_conversations(CONVERSATIONS, search="thanks")] == [4]
    assert [c.id for c in filter_conversations(CONVERSATIONS, search="mi")] == [3]
