from pydantic import BaseModel, Field, field_serializer
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from app.models.notification import NotificationType, NotificationPriority


class NotificationCreate(BaseModel):
    """Sent by admin/hr/manager/teamlead to one or more users"""
    user_ids: List[UUID] = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.info
    priority: NotificationPriority = NotificationPriority.normal
    action_url: Optional[str] = None
    meta: Optional[dict] = None


class NotificationUpdate(BaseModel):
    is_read: Optional[bool] = None


class NotificationInDB(BaseModel):
    id: UUID
    user_id: UUID
    sender_id: Optional[UUID] = None
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    meta: Optional[dict] = None
    action_url: Optional[str] = None
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None

    @field_serializer('id')
    def serialize_id(self, value: UUID) -> str:
        return str(value)

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    items: list[NotificationInDB]
    total: int
    unread_count: int
