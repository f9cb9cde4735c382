"""
Notification delivery.

publish() stores one Notification row per recipient and then pushes every
row to the subscribers (websocket hubs, telegram bridges, tests).
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationPriority, NotificationType

logger = logging.getLogger(__name__)

Subscriber = Callable[[Notification], Any]


class NotificationBus:
    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Subscriber:
        if callback not in self._subscribers:
            self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscribers(self) -> List[Subscriber]:
        return list(self._subscribers)

    def publish(
        self,
        db: Session,
        user_ids: Iterable,
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
        priority: NotificationPriority = NotificationPriority.normal,
        sender_id=None,
        meta: Optional[Dict[str, Any]] = None,
        action_url: Optional[str] = None,
    ) -> List[Notification]:
        notifications = [
            Notification(
                user_id=user_id,
                sender_id=sender_id,
                type=type,
                priority=priority,
                title=title,
                message=message,
                meta=meta,
                action_url=action_url,
            )
            for user_id in user_ids
        ]
        if not notifications:
            return []

        db.add_all(notifications)
        db.commit()
        for notification in notifications:
            db.refresh(notification)
        logger.info(f"Notification '{title}' sent to {len(notifications)} user(s)")

        for notification in notifications:
            for callback in self.subscribers:
                try:
                    callback(notification)
                except Exception as e:
                    logger.error(f"Notification subscriber {callback!r} failed: {e}", exc_info=True)
        return notifications


bus = NotificationBus()


def notify_card_assignment(db: Session, junior_id, card_mask: str, sender_id=None) -> List[Notification]:
    return bus.publish(
        db,
        [junior_id],
        title="New card assigned",
        message=f"Card {card_mask} was assigned to you",
        type=NotificationType.card_assignment,
        sender_id=sender_id,
        meta={"card_mask": card_mask},
        action_url="/dashboard/junior/cards",
    )


def notify_bank_assignment(db: Session, teamlead_id, bank_name: str, sender_id=None) -> List[Notification]:
    return bus.publish(
        db,
        [teamlead_id],
        title="New bank assigned",
        message=f"Bank {bank_name} was assigned to you",
        type=NotificationType.bank_assignment,
        sender_id=sender_id,
        meta={"bank_name": bank_name},
        action_url="/dashboard/teamlead/banks",
    )


def notify_withdrawal_action(
    db: Session, user_id, action: str, amount, performed_by, comment: Optional[str] = None
) -> List[Notification]:
    priority = NotificationPriority.high if action in ("reject", "block") else NotificationPriority.normal
    message = f"Your withdrawal of {amount} was processed: {action}"
    if comment:
        message += f" ({comment})"
    return bus.publish(
        db,
        [user_id],
        title="Withdrawal update",
        message=message,
        type=NotificationType.withdrawal,
        priority=priority,
        sender_id=performed_by.id,
        meta={"action": action, "performed_by": performed_by.full_name},
    )
