from typing import Any, List, Optional
from datetime import datetime
from hospital_booking.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    id: int
    title: str
    message: str
    type: str
    data: Optional[Any] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationList(CamelModel):
    success: bool = True
    unread_count: int
    data: List[NotificationResponse]
