from datetime import datetime, timedelta, timezone
import logging

from skillswap.core.dto import TypingIndicatorDTO
from skillswap.core.interfaces import TypingInterface
from .conversations import ConversationStore


class TypingSignal:
    """
    Ephemeral "is typing" signal.

    Each announcement appends a new indicator; nothing is updated or deleted.
    An indicator counts as active while it is younger than `ttl_ms`.
    """

    def __init__(
            self,
            typing_gateway: TypingInterface,
            conversations: ConversationStore,
            logger: logging.Logger,
            ttl_ms: int = 3000
    ):
        self._typing = typing_gateway
        self._conversations = conversations
        self.logger = logger
        self.ttl_ms = ttl_ms

    async def announce_typing(
            self,
            conversation_id: int,
            user_id: str,
            user_name: str,
            now: datetime | None = None
    ) -> TypingIndicatorDTO:
        await self._conversations.get_as_participant(conversation_id, user_id)

        indicator = TypingIndicatorDTO(
            user_id=user_id,
            user_name=user_name,
            conversation_id=conversation_id,
            timestamp=now or datetime.now(timezone.utc)
        )
        await self._typing.add_indicator(indicator)
        return indicator

    async def active_typers(
            self,
            conversation_id: int,
            viewer_id: str,
            now: datetime | None = None
    ) -> list[TypingIndicatorDTO]:
        await self._conversations.get_as_participant(conversation_id, viewer_id)

        now = now or datetime.now(timezone.utc)
        since = now - timedelta(milliseconds=self.ttl_ms)
        indicators = await self._typing.get_indicators_since(conversation_id, since)

        # latest indicator per user
        latest: dict[str, TypingIndicatorDTO] = {}
        for indicator in indicators:
            if indicator.user_id == viewer_id or indicator.timestamp <= since:
                continue
            current = latest.get(indicator.user_id)
            if current is None or indicator.timestamp > current.timestamp:
                latest[indicator.user_id] = indicator
        return sorted(latest.values(), key=lambda i: i.timestamp)
