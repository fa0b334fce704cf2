import logging

from skillswap.core.dto import MessageDTO, MessageType, NotificationType
from skillswap.core.errors import NotFound, Unauthorized, InvalidTransition, InvalidPayload
from skillswap.core.interfaces import MessageInterface, DirectoryInterface
from .conversations import ConversationStore
from .fanout import NotificationFanout

TOMBSTONE = "This message was deleted"


class MessageStream:
    """
    Append-only, ordered messages of a conversation.

    Messages are never removed: an edit overwrites the content in place and a
    delete replaces it with a tombstone, so the sequence keeps its shape.
    """

    def __init__(
            self,
            message_gateway: MessageInterface,
            conversations: ConversationStore,
            directory: DirectoryInterface,
            fanout: NotificationFanout,
            logger: logging.Logger
    ):
        self._messages = message_gateway
        self._conversations = conversations
        self._directory = directory
        self._fanout = fanout
        self.logger = logger

    async def _get(self, message_id: int) -> MessageDTO:
        message = await self._messages.get_message_by_id(message_id)
        if message is None:
            raise NotFound("Message not found")
        return message

    async def send(
            self,
            conversation_id: int,
            sender_id: str,
            content: str,
            message_type: MessageType = MessageType.TEXT
    ) -> MessageDTO:
        content = (content or "").strip()
        if not content:
            raise InvalidPayload("Message content must not be empty")

        conversation = await self._conversations.get_as_participant(conversation_id, sender_id)
        receiver_id = conversation.other_participant(sender_id)

        message = await self._messages.create_message(
            conversation_id=conversation_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            message_type=message_type
        )
        await self._conversations.append_unread(conversation_id, receiver_id, 1)

        sender = await self._directory.get_user_by_id(sender_id)
        sender_name = sender.display_name if sender else "Unknown"
        await self._fanout.notify(
            user_id=receiver_id,
            notification_type=NotificationType.MESSAGE,
            title="New message",
            message=f"{sender_name} sent you a message",
            data={"conversationId": conversation_id}
        )
        return message

    async def mark_read(self, message_id: int, actor_id: str) -> MessageDTO:
        message = await self._get(message_id)
        if message.receiver_id != actor_id:
            raise Unauthorized("Only the receiver can mark a message as read")
        if not message.read:
            await self._messages.mark_as_read(message_id)
        return message.model_copy(update={"read": True})

    async def edit(self, message_id: int, actor_id: str, new_content: str) -> MessageDTO:
        new_content = (new_content or "").strip()
        if not new_content:
            raise InvalidPayload("Message content must not be empty")

        message = await self._get(message_id)
        if message.sender_id != actor_id:
            raise Unauthorized("Only the sender can edit a message")
        if message.deleted:
            raise InvalidTransition("A deleted message cannot be edited")

        if not await self._messages.update_content(message_id, new_content):
            raise InvalidTransition("A deleted message cannot be edited")
        return message.model_copy(update={"content": new_content, "edited": True})

    async def soft_delete(self, message_id: int, actor_id: str) -> MessageDTO:
        message = await self._get(message_id)
        if message.sender_id != actor_id:
            raise Unauthorized("Only the sender can delete a message")

        if not message.deleted:
            await self._messages.soft_delete(message_id, TOMBSTONE)
            self.logger.info("Message %s deleted by %s", message_id, actor_id)
        return message.model_copy(update={"content": TOMBSTONE, "deleted": True})

    async def list_messages(self, conversation_id: int, viewer_id: str) -> list[MessageDTO]:
        await self._conversations.get_as_participant(conversation_id, viewer_id)
        return await self._messages.get_messages(conversation_id)

    async def list_after(self, conversation_id: int, viewer_id: str, after_id: int) -> list[MessageDTO]:
        await self._conversations.get_as_participant(conversation_id, viewer_id)
        return await self._messages.get_messages(conversation_id, after_id=after_id)

    async def read(self, message_id: int, viewer_id: str) -> MessageDTO:
        message = await self._get(message_id)
        if viewer_id not in (message.sender_id, message.receiver_id):
            raise Unauthorized("You are not a participant of this conversation")
        return message
