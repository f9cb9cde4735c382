import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import Optional
from datetime import datetime

from app.api.deps import get_db, get_current_active_user, require_roles
from app.crud.crud_user import user_crud
from app.models.notification import Notification, NotificationType
from app.models.user import User, UserRole
from app.schemas.notification import (
    NotificationCreate,
    NotificationListResponse,
    NotificationInDB,
    NotificationUpdate
)
from app.services.notifier import bus

logger = logging.getLogger(__name__)

router = APIRouter()

SENDERS = (UserRole.admin, UserRole.hr, UserRole.manager, UserRole.teamlead)


def _get_own_or_404(db: Session, notification_id: uuid.UUID, user: User) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user.id,
    ).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


def _unread(db: Session, user: User):
    return db.query(Notification).filter(
        Notification.user_id == user.id,
        Notification.is_read == False,
    )


@router.get("", response_model=NotificationListResponse)
def get_notifications(
    skip: int = 0,
    limit: int = 50,
    unread_only: bool = False,
    type: Optional[NotificationType] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Notifications of the current user, newest first"""
    query = db.query(Notification).filter(Notification.user_id == current_user.id)

    if unread_only:
        query = query.filter(Notification.is_read == False)
    if type:
        query = query.filter(Notification.type == type)

    query = query.order_by(desc(Notification.created_at))

    total = query.count()
    unread_count = _unread(db, current_user).count()

    notifications = query.offset(skip).limit(limit).all()

    return NotificationListResponse(
        items=[NotificationInDB.model_validate(n) for n in notifications],
        total=total,
        unread_count=unread_count
    )


@router.get("/unread-count")
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return {"count": _unread(db, current_user).count()}


@router.post("")
def send_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*SENDERS))
):
    """Send one notification to each listed user"""
    missing = [str(uid) for uid in payload.user_ids if not user_crud.get(db, uid)]
    if missing:
        raise HTTPException(status_code=404, detail=f"Users not found: {', '.join(missing)}")

    notifications = bus.publish(
        db,
        payload.user_ids,
        title=payload.title,
        message=payload.message,
        type=payload.type,
        priority=payload.priority,
        sender_id=current_user.id,
        meta=payload.meta,
        action_url=payload.action_url,
    )
    return {
        "success": True,
        "count": len(notifications),
        "message": f"Notification sent to {len(notifications)} user(s)",
    }


@router.post("/mark-all-read")
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    updated = _unread(db, current_user).update(
        {"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False
    )
    db.commit()
    return {"success": True, "updated": updated, "message": "All notifications marked as read"}


@router.patch("/{notification_id}", response_model=NotificationInDB)
def update_notification(
    notification_id: uuid.UUID,
    update_data: NotificationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Mark a notification read or unread"""
    notification = _get_own_or_404(db, notification_id, current_user)

    if update_data.is_read is not None:
        notification.is_read = update_data.is_read
        notification.read_at = datetime.utcnow() if update_data.is_read else None

    db.commit()
    db.refresh(notification)

    return NotificationInDB.model_validate(notification)


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    notification = _get_own_or_404(db, notification_id, current_user)
    db.delete(notification)
    db.commit()
    return {"success": True, "message": "Notification deleted"}
