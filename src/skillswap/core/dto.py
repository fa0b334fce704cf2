from pydantic import BaseModel, Field
from datetime import datetime
import enum


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    BLOCKED = "blocked"


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    VOICE = "voice"
    GIF = "gif"


class NotificationType(str, enum.Enum):
    MESSAGE_REQUEST = "message_request"
    MESSAGE_ACCEPTED = "message_accepted"
    MESSAGE_DECLINED = "message_declined"
    MESSAGE = "message"


class UserDTO(BaseModel):
    id: str
    name: str = ""
    email: str = ""
    rating: float = 0
    profile_picture: str | None = None
    is_online: bool = False
    last_seen: datetime | None = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@")[0]
        return "Unknown"

class MessageRequestDTO(BaseModel):
    id: int
    from_user_id: str
    to_user_id: str
    from_user_name: str
    to_user_name: str
    message: str
    status: RequestStatus
    created_at: datetime
    is_hidden: bool

class BlockRecordDTO(BaseModel):
    id: int
    user_id: str
    blocked_user_id: str
    blocked_user_name: str
    created_at: datetime

class ConversationDTO(BaseModel):
    id: int
    participants: list[str]
    last_message: str
    last_message_time: datetime
    unread_count: dict[str, int]
    is_pinned: dict[str, bool]
    theme: str
    created_at: datetime

    def other_participant(self, user_id: str) -> str | None:
        return next((p for p in self.participants if p != user_id), None)

class ConversationViewDTO(BaseModel):
    """ A conversation as seen by one participant, joined with the counterpart's profile """
    id: int
    participants: list[str]
    last_message: str
    last_message_time: datetime
    unread_count: int
    is_pinned: bool
    theme: str
    other_user: UserDTO

class MessageDTO(BaseModel):
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

class TypingIndicatorDTO(BaseModel):
    user_id: str
    user_name: str
    conversation_id: int
    timestamp: datetime

class NotificationDTO(BaseModel):
    id: int
    user_id: str
    type: str
    title: str
    message: str
    read: bool
    created_at: datetime
    data: dict = Field(default_factory=dict)
