from pydantic import BaseModel, Field
from datetime import datetime

from skillswap.core.dto import MessageType


class MessageSendRequest(BaseModel):
    content: str = Field(..., min_length=1)
    type: MessageType = MessageType.TEXT

class MessageEditRequest(BaseModel):
    content: str = Field(..., min_length=1)

class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender_id: str
    receiver_id: str
    content: str
    created_at: datetime
    read: bool
    type: MessageType
    edited: bool
    deleted: bool

class PollingResponse(BaseModel):
    has_messages: bool
    messages: list[MessageResponse] = []
    last_message_id: int | None = None

class TypingAnnounceRequest(BaseModel):
    user_name: str | None = None

class TypingIndicatorResponse(BaseModel):
    user_id: str
    user_name: str
    conversation_id: int
    timestamp: datetime
