from pydantic import BaseModel, Field
from datetime import datetime


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    type: str
    title: str
    message: str
    read: bool
    created_at: datetime
    data: dict = Field(default_factory=dict)

class NotificationPollingResponse(BaseModel):
    has_notifications: bool
    notifications: list[NotificationResponse] = []
    last_notification_id: int | None = None

class BadgeCountsResponse(BaseModel):
    notifications: int
    messages: int
    requests: int
    total: int
