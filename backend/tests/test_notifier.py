from app.models.notification import Notification, NotificationPriority, NotificationType
from app.models.user import UserRole
from app.services.notifier import NotificationBus, notify_card_assignment, notify_withdrawal_action


def test_publish_stores_one_row_per_user(db, make_user):
    users = [make_user(UserRole.junior), make_user(UserRole.junior)]
    bus = NotificationBus()

    sent = bus.publish(db, [u.id for u in users], title="Hi", message="Hello")

    assert len(sent) == 2
    assert db.query(Notification).count() == 2
    assert {n.user_id for n in sent} == {u.id for u in users}
    assert all(not n.is_read for n in sent)


def test_subscribers_receive_every_notification(db, make_user):
    user = make_user()
    bus = NotificationBus()
    received = []
    bus.subscribe(received.append)

    bus.publish(db, [user.id], title="Hi", message="Hello")

    assert [n.title for n in received] == ["Hi"]


def test_failing_subscriber_does_not_stop_delivery(db, make_user):
    user = make_user()
    bus = NotificationBus()
    received = []

    def broken(notification):
        raise RuntimeError("socket closed")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    sent = bus.publish(db, [user.id], title="Hi", message="Hello")

    assert len(sent) == 1
    assert len(received) == 1


def test_unsubscribe(db, make_user):
    user = make_user()
    bus = NotificationBus()
    received = []
    bus.subscribe(received.append)
    bus.unsubscribe(received.append)

    bus.publish(db, [user.id], title="Hi", message="Hello")

    assert received == []
    assert bus.subscribers == []


def test_no_recipients(db):
    assert NotificationBus().publish(db, [], title="Hi", message="Hello") == []


def test_card_assignment_helper(db, make_user):
    junior = make_user(UserRole.junior)
    manager = make_user(UserRole.manager)

    [notification] = notify_card_assignment(db, junior.id, "4111****0001", sender_id=manager.id)

    assert notification.type == NotificationType.card_assignment
    assert "4111****0001" in notification.message
    assert notification.sender_id == manager.id


def test_withdrawal_helper_raises_priority_on_block(db, make_user):
    junior = make_user(UserRole.junior)
    manager = make_user(UserRole.manager)

    [blocked] = notify_withdrawal_action(db, junior.id, "block", "$50.00", manager, comment="fraud check")
    [approved] = notify_withdrawal_action(db, junior.id, "approve", "$50.00", manager)

    assert blocked.priority == NotificationPriority.high
    assert "fraud check" in blocked.message
    assert approved.priority == NotificationPriority.normal
