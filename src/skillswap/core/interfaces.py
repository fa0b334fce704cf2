from abc import ABC, abstractmethod

from .dto import *


class DirectoryInterface(ABC):
    @abstractmethod
    async def get_user_by_id(
            self,
            user_id: str
    ) -> UserDTO | None:
        """
        Get directory profile by User.id
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_users_by_ids(
            self,
            user_ids: list[str]
    ) -> list[UserDTO]:
        """
        Get directory profiles for several users; unknown ids are skipped.
        :param user_ids:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def upsert_user(
            self,
            user: UserDTO
    ) -> UserDTO:
        """
        Creates or replaces a directory profile.
        Used by the identity side's profile sync; no messaging endpoint writes profiles.
        :param user:
        :return:
        """
        raise NotImplementedError()


class RequestInterface(ABC):
    @abstractmethod
    async def create_request(
            self,
            from_user_id: str,
            to_user_id: str,
            from_user_name: str,
            to_user_name: str,
            message: str
    ) -> MessageRequestDTO:
        """
        Creates a pending message request.
        Raises DuplicatePending if the ordered pair already has one.
        :param from_user_id:
        :param to_user_id:
        :param from_user_name:
        :param to_user_name:
        :param message:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_request(
            self,
            request_id: int
    ) -> MessageRequestDTO | None:
        raise NotImplementedError()

    @abstractmethod
    async def get_pending_request(
            self,
            from_user_id: str,
            to_user_id: str
    ) -> MessageRequestDTO | None:
        """
        Gets the pending request for the ordered pair, if any.
        :param from_user_id:
        :param to_user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_incoming_requests(
            self,
            to_user_id: str,
            hidden: bool
    ) -> list[MessageRequestDTO]:
        """
        Gets pending requests addressed to a user, newest first.
        :param to_user_id:
        :param hidden: which inbox partition to return
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_outgoing_requests(
            self,
            from_user_id: str
    ) -> list[MessageRequestDTO]:
        raise NotImplementedError()

    @abstractmethod
    async def count_pending_incoming(
            self,
            to_user_id: str
    ) -> int:
        raise NotImplementedError()

    @abstractmethod
    async def update_status(
            self,
            request_id: int,
            status: RequestStatus
    ) -> bool:
        """
        Moves a pending request to a new status.
        :param request_id:
        :param status:
        :return: False if the request was no longer pending
        """
        raise NotImplementedError()

    @abstractmethod
    async def set_hidden(
            self,
            request_id: int,
            hidden: bool
    ) -> bool:
        raise NotImplementedError()

    @abstractmethod
    async def delete_request(
            self,
            request_id: int
    ) -> bool:
        """
        Hard-deletes a pending request.
        :param request_id:
        :return: False if the request was no longer pending
        """
        raise NotImplementedError()

    @abstractmethod
    async def block_request(
            self,
            request: MessageRequestDTO
    ) -> BlockRecordDTO:
        """
        Marks a pending request blocked and records the block.
        :param request:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_block_records(
            self,
            user_id: str
    ) -> list[BlockRecordDTO]:
        raise NotImplementedError()

    @abstractmethod
    async def accept_request(
            self,
            request: MessageRequestDTO,
            seed_content: str
    ) -> ConversationDTO:
        """
        Accepts a pending request, creates the conversation and its seed message.
        :param request:
        :param seed_content: text of the first message, sent by the recipient
        :return:
        """
        raise NotImplementedError()


class ConversationInterface(ABC):
    @abstractmethod
    async def get_conversation(
            self,
            conversation_id: int
    ) -> ConversationDTO | None:
        raise NotImplementedError()

    @abstractmethod
    async def get_conversations_for_user(
            self,
            user_id: str
    ) -> list[ConversationDTO]:
        """
        Gets conversations the user participates in, most recent activity first.
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def increment_unread(
            self,
            conversation_id: int,
            user_id: str,
            delta: int
    ) -> int | None:
        """
        Atomically adds delta to the participant's unread counter.
        :param conversation_id:
        :param user_id:
        :param delta:
        :return: new counter value, None if the user is not a participant
        """
        raise NotImplementedError()

    @abstractmethod
    async def reset_unread(
            self,
            conversation_id: int,
            user_id: str
    ) -> bool:
        raise NotImplementedError()

    @abstractmethod
    async def toggle_pin(
            self,
            conversation_id: int,
            user_id: str
    ) -> bool | None:
        """
        Flips the participant's pin flag.
        :param conversation_id:
        :param user_id:
        :return: new flag value, None if the user is not a participant
        """
        raise NotImplementedError()

    @abstractmethod
    async def set_theme(
            self,
            conversation_id: int,
            theme: str
    ) -> bool:
        raise NotImplementedError()

    @abstractmethod
    async def count_unread_conversations(
            self,
            user_id: str
    ) -> int:
        raise NotImplementedError()


class MessageInterface(ABC):
    @abstractmethod
    async def create_message(
            self,
            conversation_id: int,
            sender_id: str,
            receiver_id: str,
            content: str,
            message_type: MessageType
    ) -> MessageDTO:
        """
        Appends a message and updates the conversation's last message.
        :param conversation_id:
        :param sender_id:
        :param receiver_id:
        :param content:
        :param message_type:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_message_by_id(
            self,
            message_id: int
    ) -> MessageDTO | None:
        raise NotImplementedError()

    @abstractmethod
    async def get_messages(
            self,
            conversation_id: int,
            after_id: int = 0
    ) -> list[MessageDTO]:
        """
        Gets messages of a conversation in creation order.
        :param conversation_id:
        :param after_id: only messages with a greater id
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def mark_as_read(
            self,
            message_id: int
    ) -> bool:
        raise NotImplementedError()

    @abstractmethod
    async def mark_conversation_read(
            self,
            conversation_id: int,
            receiver_id: str
    ) -> int:
        """
        Marks every unread message addressed to receiver_id as read.
        :param conversation_id:
        :param receiver_id:
        :return: number of messages changed
        """
        raise NotImplementedError()

    @abstractmethod
    async def update_content(
            self,
            message_id: int,
            content: str
    ) -> bool:
        """
        Overwrites the content of a message that is not deleted.
        :param message_id:
        :param content:
        :return: False if the message is deleted or missing
        """
        raise NotImplementedError()

    @abstractmethod
    async def soft_delete(
            self,
            message_id: int,
            tombstone: str
    ) -> bool:
        raise NotImplementedError()


class NotificationInterface(ABC):
    @abstractmethod
    async def create_notification(
            self,
            user_id: str,
            notification_type: str,
            title: str,
            message: str,
            data: dict
    ) -> NotificationDTO:
        raise NotImplementedError()

    @abstractmethod
    async def get_notification(
            self,
            notification_id: int
    ) -> NotificationDTO | None:
        raise NotImplementedError()

    @abstractmethod
    async def get_notifications(
            self,
            user_id: str,
            after_id: int = 0
    ) -> list[NotificationDTO]:
        """
        Gets a user's notifications, newest first.
        :param user_id:
        :param after_id: only notifications with a greater id
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def mark_as_read(
            self,
            notification_id: int
    ) -> bool:
        raise NotImplementedError()

    @abstractmethod
    async def mark_all_as_read(
            self,
            user_id: str
    ) -> int:
        raise NotImplementedError()

    @abstractmethod
    async def count_unread(
            self,
            user_id: str
    ) -> int:
        raise NotImplementedError()


class TypingInterface(ABC):
    @abstractmethod
    async def add_indicator(
            self,
            indicator: TypingIndicatorDTO
    ) -> None:
        """
        Appends a typing indicator to the conversation's log.
        :param indicator:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_indicators_since(
            self,
            conversation_id: int,
            since: datetime
    ) -> list[TypingIndicatorDTO]:
        """
        Gets indicators strictly newer than `since`.
        :param conversation_id:
        :param since:
        :return:
        """
        raise NotImplementedError()
