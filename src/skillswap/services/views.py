"""
Consumer-side view transforms for request and conversation lists.

Nothing here is stored; these reproduce the search box and sort selector of
the messages screen.
"""
from skillswap.core.dto import MessageRequestDTO, ConversationViewDTO

REQUEST_SORTS = ("newest", "oldest", "name")
CONVERSATION_SORTS = ("recent", "name", "unread", "pinned")


def filter_requests(
        requests: list[MessageRequestDTO],
        search: str | None = None,
        sort_by: str = "newest"
) -> list[MessageRequestDTO]:
    if search:
        needle = search.lower()
        requests = [
            r for r in requests
            if needle in r.from_user_name.lower() or needle in r.message.lower()
        ]

    if sort_by == "oldest":
        return sorted(requests, key=lambda r: (r.created_at, r.id))
    if sort_by == "name":
        return sorted(requests, key=lambda r: r.from_user_name.lower())
    return sorted(requests, key=lambda r: (r.created_at, r.id), reverse=True)


def filter_conversations(
        conversations: list[ConversationViewDTO],
        search: str | None = None,
        sort_by: str = "recent"
) -> list[ConversationViewDTO]:
    if search:
        needle = search.lower()
        conversations = [
            c for c in conversations
            if needle in c.other_user.name.lower() or needle in c.last_message.lower()
        ]

    if sort_by == "name":
        return sorted(conversations, key=lambda c: c.other_user.name.lower())
    if sort_by == "unread":
        return sorted(conversations, key=lambda c: c.unread_count, reverse=True)
    if sort_by == "pinned":
        # pinned first, then unread descending
        return sorted(conversations, key=lambda c: (not c.is_pinned, -c.unread_count))
    # stored order is already last_message_time descending
    return list(conversations)
