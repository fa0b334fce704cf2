from pydantic import BaseModel
from datetime import datetime


class UserProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    rating: float
    profile_picture: str | None = None
    is_online: bool = False
    last_seen: datetime | None = None

class ConversationResponse(BaseModel):
    id: int
    participants: list[str]
    last_message: str
    last_message_time: datetime
    unread_count: int
    is_pinned: bool
    theme: str
    other_user: UserProfileResponse

class ThemeUpdateRequest(BaseModel):
    theme: str

class PinResponse(BaseModel):
    conversation_id: int
    is_pinned: bool

class OpenResponse(BaseModel):
    conversation_id: int
    marked_read: int
