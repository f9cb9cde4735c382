from sqlalchemy import Column, String, DateTime, Boolean, Enum, Text, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID
from .base import BaseModel
import enum


class NotificationType(str, enum.Enum):
    """Notification kind"""
    info = "info"
    warning = "warning"
    success = "success"
    error = "error"
    card_assignment = "card_assignment"
    bank_assignment = "bank_assignment"
    withdrawal = "withdrawal"
    task = "task"


class NotificationPriority(str, enum.Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


class Notification(BaseModel):
    """Per-user notification"""
    __tablename__ = "notifications"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    type = Column(Enum(NotificationType), nullable=False, default=NotificationType.info)
    priority = Column(Enum(NotificationPriority), nullable=False, default=NotificationPriority.normal)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    meta = Column("metadata", JSON, nullable=True)
    action_url = Column(String(500), nullable=True)

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
