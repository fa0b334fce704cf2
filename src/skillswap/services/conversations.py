import logging

from skillswap.core.dto import ConversationDTO, ConversationViewDTO, UserDTO
from skillswap.core.errors import NotFound, Unauthorized, InvalidPayload
from skillswap.core.interfaces import ConversationInterface, MessageInterface, DirectoryInterface

THEMES = ("default", "dark", "blue", "green", "purple")


class ConversationStore:
    """
    Two-party conversations created by accepted message requests.

    Membership never changes after creation. Each participant owns an unread
    counter and a pin flag; the theme is shared by both.
    """

    def __init__(
            self,
            conversation_gateway: ConversationInterface,
            message_gateway: MessageInterface,
            directory: DirectoryInterface,
            logger: logging.Logger
    ):
        self._conversations = conversation_gateway
        self._messages = message_gateway
        self._directory = directory
        self.logger = logger

    async def get(self, conversation_id: int) -> ConversationDTO:
        conversation = await self._conversations.get_conversation(conversation_id)
        if conversation is None:
            raise NotFound("Conversation not found")
        return conversation

    async def get_as_participant(self, conversation_id: int, user_id: str) -> ConversationDTO:
        conversation = await self.get(conversation_id)
        if user_id not in conversation.participants:
            raise Unauthorized("You are not a participant of this conversation")
        return conversation

    async def append_unread(self, conversation_id: int, for_user_id: str, delta: int = 1) -> int:
        count = await self._conversations.increment_unread(conversation_id, for_user_id, delta)
        if count is None:
            await self.get_as_participant(conversation_id, for_user_id)
            raise NotFound("Conversation not found")
        return count

    async def reset_unread(self, conversation_id: int, for_user_id: str) -> None:
        if not await self._conversations.reset_unread(conversation_id, for_user_id):
            await self.get_as_participant(conversation_id, for_user_id)

    async def toggle_pin(self, conversation_id: int, for_user_id: str) -> bool:
        pinned = await self._conversations.toggle_pin(conversation_id, for_user_id)
        if pinned is None:
            await self.get_as_participant(conversation_id, for_user_id)
            raise NotFound("Conversation not found")
        return pinned

    async def set_theme(self, conversation_id: int, actor_id: str, theme: str) -> None:
        if theme not in THEMES:
            raise InvalidPayload(f"Unknown theme '{theme}'")
        await self.get_as_participant(conversation_id, actor_id)
        await self._conversations.set_theme(conversation_id, theme)

    async def open(self, conversation_id: int, user_id: str) -> int:
        """
        Reset the user's unread counter and mark every message addressed to
        them as read. Returns the number of messages that changed.
        """
        await self.get_as_participant(conversation_id, user_id)
        await self._conversations.reset_unread(conversation_id, user_id)
        return await self._messages.mark_conversation_read(conversation_id, user_id)

    async def list_for_user(self, user_id: str) -> list[ConversationViewDTO]:
        conversations = await self._conversations.get_conversations_for_user(user_id)

        other_ids = [c.other_participant(user_id) for c in conversations]
        profiles = {
            user.id: user
            for user in await self._directory.get_users_by_ids([i for i in other_ids if i])
        }

        return [
            self._view(conversation, user_id, profiles.get(other_id))
            for conversation, other_id in zip(conversations, other_ids)
            if other_id
        ]

    async def get_for_user(self, conversation_id: int, user_id: str) -> ConversationViewDTO:
        conversation = await self.get_as_participant(conversation_id, user_id)
        other_id = conversation.other_participant(user_id)
        return self._view(conversation, user_id, await self._directory.get_user_by_id(other_id))

    @staticmethod
    def _view(conversation: ConversationDTO, user_id: str, other_user: UserDTO | None) -> ConversationViewDTO:
        other_id = conversation.other_participant(user_id)
        if other_user is None:
            other_user = UserDTO(id=other_id, name="Unknown")
        else:
            other_user = other_user.model_copy(update={"name": other_user.display_name})
        return ConversationViewDTO(
            id=conversation.id,
            participants=conversation.participants,
            last_message=conversation.last_message,
            last_message_time=conversation.last_message_time,
            unread_count=conversation.unread_count.get(user_id, 0),
            is_pinned=conversation.is_pinned.get(user_id, False),
            theme=conversation.theme,
            other_user=other_user
        )
