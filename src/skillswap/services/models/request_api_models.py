from pydantic import BaseModel, Field
from datetime import datetime

from skillswap.core.dto import RequestStatus


class SendMessageRequest(BaseModel):
    to_user_id: str = Field(..., min_length=1, max_length=128)
    message: str = Field(..., min_length=1)

class HiddenUpdateRequest(BaseModel):
    hidden: bool

class MessageRequestResponse(BaseModel):
    id: int
    from_user_id: str
    to_user_id: str
    from_user_name: str
    to_user_name: str
    message: str
    status: RequestStatus
    created_at: datetime
    is_hidden: bool

class AcceptResponse(BaseModel):
    status: str = "accepted"
    conversation_id: int

class BlockRecordResponse(BaseModel):
    id: int
    user_id: str
    blocked_user_id: str
    blocked_user_name: str
    created_at: datetime
