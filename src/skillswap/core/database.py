from sqlalchemy import ForeignKey, String, Text, DateTime, Boolean, Index, Integer, Float, JSON, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from datetime import datetime, timezone
from typing import List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass

class User(Base):
    """ Directory profile, mirrored from the identity provider """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), default="")
    email: Mapped[str] = mapped_column(String(255), default="", index=True)
    rating: Mapped[float] = mapped_column(Float, default=0)
    profile_picture: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_online: Mapped[bool] = mapped_column(Boolean, default=False)
    last_seen: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

class MessageRequest(Base):
    __tablename__ = "message_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    from_user_id: Mapped[str] = mapped_column(String(128), index=True)
    to_user_id: Mapped[str] = mapped_column(String(128), index=True)
    from_user_name: Mapped[str] = mapped_column(String(100))
    to_user_name: Mapped[str] = mapped_column(String(100))
    message: Mapped[str] = mapped_column(String(500))
    status: Mapped[str] = mapped_column(String(16), default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        Index(
            'ux_message_requests_pending_pair',
            'from_user_id', 'to_user_id',
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
        Index('ix_message_requests_to_status', 'to_user_id', 'status'),
    )

class BlockedUser(Base):
    __tablename__ = "blocked_users"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    blocked_user_id: Mapped[str] = mapped_column(String(128))
    blocked_user_name: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(primary_key=True)
    last_message: Mapped[str] = mapped_column(Text, default="")
    last_message_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    theme: Mapped[str] = mapped_column(String(32), default="default")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    participants: Mapped[List["ConversationParticipant"]] = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        lazy="selectin",
        order_by="ConversationParticipant.id"
    )
    messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="conversation"
    )

class ConversationParticipant(Base):
    """ One row per participant: the per-user unread counter and pin flag """
    __tablename__ = "conversation_participants"

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"))
    user_id: Mapped[str] = mapped_column(String(128))
    unread_count: Mapped[int] = mapped_column(Integer, default=0)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False)

    conversation: Mapped["Conversation"] = relationship(
        "Conversation",
        back_populates="participants"
    )

    __table_args__ = (
        Index('ux_participant_conversation_user', 'conversation_id', 'user_id', unique=True),
        Index('ix_participant_user', 'user_id'),
    )

class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_conversation_created', 'conversation_id', 'created_at'),
        Index('ix_messages_receiver_read', 'receiver_id', 'read'),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"))
    sender_id: Mapped[str] = mapped_column(String(128))
    receiver_id: Mapped[str] = mapped_column(String(128))
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    type: Mapped[str] = mapped_column(String(16), default="text")
    edited: Mapped[bool] = mapped_column(Boolean, default=False)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    conversation: Mapped["Conversation"] = relationship(
        "Conversation",
        back_populates="messages"
    )

class Notification(Base):
    __tablename__ = "notifications"

    __table_args__ = (
        Index('ix_notifications_user_read', 'user_id', 'read'),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128))
    type: Mapped[str] = mapped_column(String(32))
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    data: Mapped[dict] = mapped_column(JSON, default=dict)
