from datetime import datetime
import json
import logging
import uuid

from redis import asyncio as aioredis
from sqlalchemy import select, insert, update, delete, func, not_
from sqlalchemy.exc import IntegrityError

from .database import User, MessageRequest, BlockedUser, Conversation, ConversationParticipant, Message, Notification, utcnow
from .interfaces import DirectoryInterface, RequestInterface, ConversationInterface, MessageInterface, NotificationInterface, TypingInterface
from .dto import (
    UserDTO, MessageRequestDTO, BlockRecordDTO, ConversationDTO, MessageDTO, NotificationDTO, TypingIndicatorDTO,
    RequestStatus, MessageType
)
from .errors import DuplicatePending, InvalidTransition
from .db_manager import DatabaseManager


def _user_to_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        name=user.name or "",
        email=user.email or "",
        rating=user.rating or 0,
        profile_picture=user.profile_picture,
        is_online=bool(user.is_online),
        last_seen=user.last_seen
    )

def _request_to_dto(request: MessageRequest) -> MessageRequestDTO:
    return MessageRequestDTO(
        id=request.id,
        from_user_id=request.from_user_id,
        to_user_id=request.to_user_id,
        from_user_name=request.from_user_name,
        to_user_name=request.to_user_name,
        message=request.message,
        status=request.status,
        created_at=request.created_at,
        is_hidden=request.is_hidden
    )

def _block_to_dto(block: BlockedUser) -> BlockRecordDTO:
    return BlockRecordDTO(
        id=block.id,
        user_id=block.user_id,
        blocked_user_id=block.blocked_user_id,
        blocked_user_name=block.blocked_user_name,
        created_at=block.created_at
    )

def _conversation_to_dto(conversation: Conversation) -> ConversationDTO:
    return ConversationDTO(
        id=conversation.id,
        participants=[p.user_id for p in conversation.participants],
        last_message=conversation.last_message or "",
        last_message_time=conversation.last_message_time,
        unread_count={p.user_id: p.unread_count or 0 for p in conversation.participants},
        is_pinned={p.user_id: bool(p.is_pinned) for p in conversation.participants},
        theme=conversation.theme or "default",
        created_at=conversation.created_at
    )

def _message_to_dto(message: Message) -> MessageDTO:
    return MessageDTO(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        content=message.content,
        created_at=message.created_at,
        read=message.read,
        type=message.type,
        edited=message.edited,
        deleted=message.deleted
    )

def _notification_to_dto(notification: Notification) -> NotificationDTO:
    return NotificationDTO(
        id=notification.id,
        user_id=notification.user_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        read=notification.read,
        created_at=notification.created_at,
        data=notification.data or {}
    )


class UserGateway(DirectoryInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def get_user_by_id(self, user_id: str) -> UserDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User).where(User.id == user_id)
                result = await session.execute(stmt)
                user = result.scalars().first()
                if user:
                    return _user_to_dto(user)
                else:
                    return None
            except Exception as e:
                self._logger.error("Error getting user by id in database: %s", e)
                raise

    async def get_users_by_ids(self, user_ids: list[str]) -> list[UserDTO]:
        async with self._db_manager.session() as session:
            try:
                if not user_ids:
                    return []

                stmt = select(User).where(User.id.in_(user_ids))
                result = await session.execute(stmt)
                users = result.scalars().all()

                return [_user_to_dto(user) for user in users]
            except Exception as e:
                self._logger.error("Error getting users by ids in database: %s", e)
                raise

    async def upsert_user(self, user: UserDTO) -> UserDTO:
        async with self._db_manager.session() as session:
            try:
                values = dict(
                    name=user.name,
                    email=user.email,
                    rating=user.rating,
                    profile_picture=user.profile_picture,
                    is_online=user.is_online,
                    last_seen=user.last_seen
                )
                existing = await session.get(User, user.id)
                if existing is None:
                    await session.execute(insert(User).values(id=user.id, **values))
                else:
                    await session.execute(update(User).where(User.id == user.id).values(**values))
                return user
            except Exception as e:
                self._logger.error("Error upserting user in database: %s", e)
                raise


class RequestGateway(RequestInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def create_request(
            self,
            from_user_id: str,
            to_user_id: str,
            from_user_name: str,
            to_user_name: str,
            message: str
    ) -> MessageRequestDTO:
        try:
            async with self._db_manager.session() as session:
                stmt = insert(MessageRequest).values(
                    from_user_id=from_user_id,
                    to_user_id=to_user_id,
                    from_user_name=from_user_name,
                    to_user_name=to_user_name,
                    message=message,
                    status=RequestStatus.PENDING.value,
                    is_hidden=False
                ).returning(MessageRequest)
                result = await session.execute(stmt)
                request = result.scalars().first()
                return _request_to_dto(request)
        except IntegrityError as e:
            # the partial unique index closes the window left by the pre-write check
            raise DuplicatePending("You already have a pending message request to this user") from e
        except Exception as e:
            self._logger.error("Error creating message request in database: %s", e)
            raise

    async def get_request(self, request_id: int) -> MessageRequestDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(MessageRequest).where(MessageRequest.id == request_id)
                result = await session.execute(stmt)
                request = result.scalars().first()

                if request is None:
                    return None

                return _request_to_dto(request)
            except Exception as e:
                self._logger.error("Error getting message request in database: %s", e)
                raise

    async def get_pending_request(self, from_user_id: str, to_user_id: str) -> MessageRequestDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(MessageRequest).where(
                    MessageRequest.from_user_id == from_user_id,
                    MessageRequest.to_user_id == to_user_id,
                    MessageRequest.status == RequestStatus.PENDING.value
                )
                result = await session.execute(stmt)
                request = result.scalars().first()

                if request is None:
                    return None

                return _request_to_dto(request)
            except Exception as e:
                self._logger.error("Error getting pending message request in database: %s", e)
                raise

    async def get_incoming_requests(self, to_user_id: str, hidden: bool) -> list[MessageRequestDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(MessageRequest).where(
                    MessageRequest.to_user_id == to_user_id,
                    MessageRequest.status == RequestStatus.PENDING.value,
                    MessageRequest.is_hidden == hidden
                ).order_by(MessageRequest.created_at.desc(), MessageRequest.id.desc())
                result = await session.execute(stmt)

                return [_request_to_dto(request) for request in result.scalars().all()]
            except Exception as e:
                self._logger.error("Error getting incoming message requests in database: %s", e)
                raise

    async def get_outgoing_requests(self, from_user_id: str) -> list[MessageRequestDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(MessageRequest).where(
                    MessageRequest.from_user_id == from_user_id
                ).order_by(MessageRequest.created_at.desc(), MessageRequest.id.desc())
                result = await session.execute(stmt)

                return [_request_to_dto(request) for request in result.scalars().all()]
            except Exception as e:
                self._logger.error("Error getting outgoing message requests in database: %s", e)
                raise

    async def count_pending_incoming(self, to_user_id: str) -> int:
        async with self._db_manager.session() as session:
            try:
                stmt = select(func.count(MessageRequest.id)).where(
                    MessageRequest.to_user_id == to_user_id,
                    MessageRequest.status == RequestStatus.PENDING.value
                )
                result = await session.execute(stmt)
                return result.scalar_one()
            except Exception as e:
                self._logger.error("Error counting pending message requests in database: %s", e)
                raise

    async def update_status(self, request_id: int, status: RequestStatus) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(MessageRequest).where(
                    MessageRequest.id == request_id,
                    MessageRequest.status == RequestStatus.PENDING.value
                ).values(status=status.value).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error updating message request status in database: %s", e)
                raise

    async def set_hidden(self, request_id: int, hidden: bool) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(MessageRequest).where(
                    MessageRequest.id == request_id,
                    MessageRequest.status == RequestStatus.PENDING.value
                ).values(is_hidden=hidden).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error hiding message request in database: %s", e)
                raise

    async def delete_request(self, request_id: int) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = delete(MessageRequest).where(
                    MessageRequest.id == request_id,
                    MessageRequest.status == RequestStatus.PENDING.value
                ).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error deleting message request in database: %s", e)
                raise

    async def block_request(self, request: MessageRequestDTO) -> BlockRecordDTO:
        async with self._db_manager.session() as session:
            try:
                stmt = update(MessageRequest).where(
                    MessageRequest.id == request.id,
                    MessageRequest.status == RequestStatus.PENDING.value
                ).values(status=RequestStatus.BLOCKED.value).execution_options(synchronize_session=False)
                result = await session.execute(stmt)
                if result.rowcount != 1:
                    raise InvalidTransition("Message request is no longer pending")

                block_stmt = insert(BlockedUser).values(
                    user_id=request.to_user_id,
                    blocked_user_id=request.from_user_id,
                    blocked_user_name=request.from_user_name
                ).returning(BlockedUser)
                block_result = await session.execute(block_stmt)
                return _block_to_dto(block_result.scalars().first())
            except InvalidTransition:
                raise
            except Exception as e:
                self._logger.error("Error blocking message request in database: %s", e)
                raise

    async def get_block_records(self, user_id: str) -> list[BlockRecordDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(BlockedUser).where(
                    BlockedUser.user_id == user_id
                ).order_by(BlockedUser.created_at.desc(), BlockedUser.id.desc())
                result = await session.execute(stmt)

                return [_block_to_dto(block) for block in result.scalars().all()]
            except Exception as e:
                self._logger.error("Error getting block records in database: %s", e)
                raise

    async def accept_request(self, request: MessageRequestDTO, seed_content: str) -> ConversationDTO:
        async with self._db_manager.session() as session:
            try:
                # One transaction: a concurrent second accept finds no pending row
                stmt = update(MessageRequest).where(
                    MessageRequest.id == request.id,
                    MessageRequest.status == RequestStatus.PENDING.value
                ).values(status=RequestStatus.ACCEPTED.value).execution_options(synchronize_session=False)
                result = await session.execute(stmt)
                if result.rowcount != 1:
                    raise InvalidTransition("Message request is no longer pending")

                now = utcnow()
                conversation = Conversation(
                    last_message="",
                    last_message_time=now,
                    theme="default",
                    created_at=now,
                    participants=[
                        ConversationParticipant(user_id=request.from_user_id, unread_count=0, is_pinned=False),
                        ConversationParticipant(user_id=request.to_user_id, unread_count=0, is_pinned=False),
                    ]
                )
                session.add(conversation)
                await session.flush()

                session.add(Message(
                    conversation_id=conversation.id,
                    sender_id=request.to_user_id,
                    receiver_id=request.from_user_id,
                    content=seed_content,
                    created_at=now,
                    read=False,
                    type=MessageType.TEXT.value,
                    edited=False,
                    deleted=False
                ))
                await session.flush()

                return _conversation_to_dto(conversation)
            except InvalidTransition:
                raise
            except Exception as e:
                self._logger.error("Error accepting message request in database: %s", e)
                raise


class ConversationGateway(ConversationInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def get_conversation(self, conversation_id: int) -> ConversationDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Conversation).where(Conversation.id == conversation_id)
                result = await session.execute(stmt)
                conversation = result.scalars().first()

                if conversation is None:
                    return None

                return _conversation_to_dto(conversation)
            except Exception as e:
                self._logger.error("Error getting conversation in database: %s", e)
                raise

    async def get_conversations_for_user(self, user_id: str) -> list[ConversationDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Conversation).join(
                    ConversationParticipant,
                    ConversationParticipant.conversation_id == Conversation.id
                ).where(
                    ConversationParticipant.user_id == user_id
                ).order_by(Conversation.last_message_time.desc(), Conversation.id.desc())
                result = await session.execute(stmt)

                return [_conversation_to_dto(c) for c in result.scalars().all()]
            except Exception as e:
                self._logger.error("Error getting conversations for user in database: %s", e)
                raise

    async def increment_unread(self, conversation_id: int, user_id: str, delta: int) -> int | None:
        async with self._db_manager.session() as session:
            try:
                stmt = update(ConversationParticipant).where(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id == user_id
                ).values(
                    unread_count=ConversationParticipant.unread_count + delta
                ).returning(ConversationParticipant.unread_count).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                return result.scalar_one_or_none()
            except Exception as e:
                self._logger.error("Error incrementing unread counter in database: %s", e)
                raise

    async def reset_unread(self, conversation_id: int, user_id: str) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(ConversationParticipant).where(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id == user_id
                ).values(unread_count=0).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error resetting unread counter in database: %s", e)
                raise

    async def toggle_pin(self, conversation_id: int, user_id: str) -> bool | None:
        async with self._db_manager.session() as session:
            try:
                stmt = update(ConversationParticipant).where(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id == user_id
                ).values(
                    is_pinned=not_(ConversationParticipant.is_pinned)
                ).returning(ConversationParticipant.is_pinned).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                pinned = result.scalar_one_or_none()
                return None if pinned is None else bool(pinned)
            except Exception as e:
                self._logger.error("Error toggling pin in database: %s", e)
                raise

    async def set_theme(self, conversation_id: int, theme: str) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Conversation).where(
                    Conversation.id == conversation_id
                ).values(theme=theme).execution_options(synchronize_session=False)

                result = await session.execute(stmt)
                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error setting conversation theme in database: %s", e)
                raise

    async def count_unread_conversations(self, user_id: str) -> int:
        async with self._db_manager.session() as session:
            try:
                stmt = select(func.count(ConversationParticipant.id)).where(
                    ConversationParticipant.user_id == user_id,
                    ConversationParticipant.unread_count > 0
                )
                result = await session.execute(stmt)
                return result.scalar_one()
            except Exception as e:
                self._logger.error("Error counting unread conversations in database: %s", e)
                raise


class MessageGateway(MessageInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def create_message(
            self,
            conversation_id: int,
            sender_id: str,
            receiver_id: str,
            content: str,
            message_type: MessageType
    ) -> MessageDTO:
        async with self._db_manager.session() as session:
            try:
                stmt = insert(Message).values(
                    conversation_id=conversation_id,
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    content=content,
                    created_at=utcnow(),
                    read=False,
                    type=message_type.value,
                    edited=False,
                    deleted=False
                ).returning(Message)
                result = await session.execute(stmt)
                msg = result.scalars().first()

                conversation_stmt = update(Conversation).where(
                    Conversation.id == conversation_id
                ).values(
                    last_message=content,
                    last_message_time=msg.created_at
                ).execution_options(synchronize_session=False)
                await session.execute(conversation_stmt)

                return _message_to_dto(msg)
            except Exception as e:
                self._logger.error("Error creating message in database: %s", e)
                raise

    async def get_message_by_id(self, message_id: int) -> MessageDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Message).where(Message.id == message_id)
                result = await session.execute(stmt)
                msg = result.scalars().first()

                if msg:
                    return _message_to_dto(msg)
                return None
            except Exception as e:
                self._logger.error("Error getting message by ID in database: %s", e)
                raise

    async def get_messages(self, conversation_id: int, after_id: int = 0) -> list[MessageDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Message).where(
                    Message.conversation_id == conversation_id,
                    Message.id > after_id
                ).order_by(Message.created_at.asc(), Message.id.asc())
                result = await session.execute(stmt)

                return [_message_to_dto(m) for m in result.scalars().all()]
            except Exception as e:
                self._logger.error("Error getting messages in database: %s", e)
                raise

    async def mark_as_read(self, message_id: int) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Message).where(
                    Message.id == message_id
                ).values(read=True).execution_options(synchronize_session=False)
                result = await session.execute(stmt)

                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error marking message read in database: %s", e)
                raise

    async def mark_conversation_read(self, conversation_id: int, receiver_id: str) -> int:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Message).where(
                    Message.conversation_id == conversation_id,
                    Message.receiver_id == receiver_id,
                    Message.read == False
                ).values(read=True).execution_options(synchronize_session=False)
                result = await session.execute(stmt)

                return result.rowcount
            except Exception as e:
                self._logger.error("Error marking conversation read in database: %s", e)
                raise

    async def update_content(self, message_id: int, content: str) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Message).where(
                    Message.id == message_id,
                    Message.deleted == False
                ).values(content=content, edited=True).execution_options(synchronize_session=False)
                result = await session.execute(stmt)

                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error editing message in database: %s", e)
                raise

    async def soft_delete(self, message_id: int, tombstone: str) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Message).where(
                    Message.id == message_id
                ).values(content=tombstone, deleted=True).execution_options(synchronize_session=False)
                result = await session.execute(stmt)

                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error deleting message in database: %s", e)
                raise


class NotificationGateway(NotificationInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def create_notification(
            self,
            user_id: str,
            notification_type: str,
            title: str,
            message: str,
            data: dict
    ) -> NotificationDTO:
        async with self._db_manager.session() as session:
            try:
                stmt = insert(Notification).values(
                    user_id=user_id,
                    type=notification_type,
                    title=title,
                    message=message,
                    read=False,
                    data=data
                ).returning(Notification)
                result = await session.execute(stmt)
                return _notification_to_dto(result.scalars().first())
            except Exception as e:
                self._logger.error("Error creating notification in database: %s", e)
                raise

    async def get_notification(self, notification_id: int) -> NotificationDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Notification).where(Notification.id == notification_id)
                result = await session.execute(stmt)
                notification = result.scalars().first()

                if notification is None:
                    return None

                return _notification_to_dto(notification)
            except Exception as e:
                self._logger.error("Error getting notification in database: %s", e)
                raise

    async def get_notifications(self, user_id: str, after_id: int = 0) -> list[NotificationDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Notification).where(
                    Notification.user_id == user_id,
                    Notification.id > after_id
                ).order_by(Notification.created_at.desc(), Notification.id.desc())
                result = await session.execute(stmt)

                return [_notification_to_dto(n) for n in result.scalars().all()]
            except Exception as e:
                self._logger.error("Error getting notifications in database: %s", e)
                raise

    async def mark_as_read(self, notification_id: int) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Notification).where(
                    Notification.id == notification_id
                ).values(read=True).execution_options(synchronize_session=False)
                result = await session.execute(stmt)

                return result.rowcount == 1
            except Exception as e:
                self._logger.error("Error marking notification read in database: %s", e)
                raise

    async def mark_all_as_read(self, user_id: str) -> int:
        async with self._db_manager.session() as session:
            try:
                stmt = update(Notification).where(
                    Notification.user_id == user_id,
                    Notification.read == False
                ).values(read=True).execution_options(synchronize_session=False)
                result = await session.execute(stmt)

                return result.rowcount
            except Exception as e:
                self._logger.error("Error marking notifications read in database: %s", e)
                raise

    async def count_unread(self, user_id: str) -> int:
        async with self._db_manager.session() as session:
            try:
                stmt = select(func.count(Notification.id)).where(
                    Notification.user_id == user_id,
                    Notification.read == False
                )
                result = await session.execute(stmt)
                return result.scalar_one()
            except Exception as e:
                self._logger.error("Error counting unread notifications in database: %s", e)
                raise


class TypingGateway(TypingInterface):
    """
    Typing indicators live in one Redis sorted set per conversation,
    scored by their timestamp in whole milliseconds. Every announcement is a
    new member carrying the exact timestamp; the key's TTL is refreshed on
    each append so an idle log expires as a whole.
    """
    __slots__ = ("_redis", "_retention_seconds", "_logger")

    def __init__(self, redis: aioredis.Redis, retention_seconds: int = 60, logger: logging.Logger | None = None):
        self._redis = redis
        self._retention_seconds = retention_seconds
        self._logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _key(conversation_id: int) -> str:
        return f"typing:{conversation_id}"

    @staticmethod
    def _to_ms(moment: datetime) -> int:
        return int(moment.timestamp() * 1000)

    async def add_indicator(self, indicator: TypingIndicatorDTO) -> None:
        key = self._key(indicator.conversation_id)
        member = json.dumps({
            "id": uuid.uuid4().hex,
            "user_id": indicator.user_id,
            "user_name": indicator.user_name,
            "conversation_id": indicator.conversation_id,
            "timestamp": indicator.timestamp.isoformat()
        })
        try:
            await self._redis.zadd(key, {member: self._to_ms(indicator.timestamp)})
            await self._redis.expire(key, self._retention_seconds)
        except Exception as e:
            self._logger.error("Error storing typing indicator in redis: %s", e)
            raise

    async def get_indicators_since(self, conversation_id: int, since: datetime) -> list[TypingIndicatorDTO]:
        """ Indicators strictly newer than `since`; the score range only narrows the candidates """
        try:
            members = await self._redis.zrangebyscore(self._key(conversation_id), self._to_ms(since), "+inf")
        except Exception as e:
            self._logger.error("Error reading typing indicators from redis: %s", e)
            raise

        indicators = []
        for member in members:
            record = json.loads(member)
            timestamp = datetime.fromisoformat(record["timestamp"])
            if timestamp <= since:
                continue
            indicators.append(TypingIndicatorDTO(
                user_id=record["user_id"],
                user_name=record["user_name"],
                conversation_id=record["conversation_id"],
                timestamp=timestamp
            ))
        return indicators
