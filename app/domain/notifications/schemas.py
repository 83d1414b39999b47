from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    status: str
    appointmentId: Optional[int] = None
    isRead: bool
    readAt: Optional[datetime] = None
    sentAt: Optional[datetime] = None
    createdAt: datetime


class UnreadCountResponse(BaseModel):
    unread: int
