"""Unit tests for notification classification, commands and time labels."""

from datetime import datetime, timedelta

import pytest

from app.models import Notification, NotificationType, Priority
from app.notifications import (
    PRIORITY_COLORS,
    TYPE_DISPLAY,
    NotificationCenter,
    display_for,
    format_relative_time,
    sort_by_priority
)

NOW = datetime(2024, 1, 20, 12, 0)


def make_notification(notification_id, is_read=False, priority=Priority.LOW, hours_ago=1):
    return Notification(
        id=notification_id,
        type=NotificationType.AT_RISK,
        title=f"Alert {notification_id}",
        message="Attendance dropped",
        timestamp=NOW - timedelta(hours=hours_ago),
        is_read=is_read,
        priority=priority,
    )


def test_every_type_has_display_attributes():
    for notification_type in NotificationType:
        assert set(display_for(notification_type)) == {'icon', 'color'}
    assert set(TYPE_DISPLAY) == set(NotificationType)
    assert set(PRIORITY_COLORS) == set(Priority)
    assert display_for(NotificationType.AT_RISK)['color'] == 'destructive'


def test_format_relative_time():
    """Test age labels around each boundary."""
    assert format_relative_time(NOW - timedelta(minutes=30), NOW) == "Just now"
    assert format_relative_time(NOW - timedelta(minutes=59, seconds=59), NOW) == "Just now"
    assert format_relative_time(NOW - timedelta(hours=1), NOW) == "1h ago"
    assert format_relative_time(NOW - timedelta(hours=3), NOW) == "3h ago"
    assert format_relative_time(NOW - timedelta(hours=23, minutes=59), NOW) == "23h ago"
    assert format_relative_time(NOW - timedelta(hours=24), NOW) == "1d ago"
    assert format_relative_time(NOW - timedelta(days=6, hours=23), NOW) == "6d ago"
    assert format_relative_time(NOW - timedelta(days=10), NOW) == "1/10/2024"


def test_mark_read_and_unknown_id():
    center = NotificationCenter([make_notification(1), make_notification(2)])
    assert center.unread_count() == 2

    assert center.mark_read(1) is True
    assert center.get(1).is_read
    assert center.unread_count() == 1

    # Repeats and unknown ids are harmless
    assert center.mark_read(1) is False
    assert center.mark_read(999) is False
    assert center.unread_count() == 1


def test_mark_all_read_only_affects_current_notifications():
    center = NotificationCenter([make_notification(1), make_notification(2, is_read=True), make_notification(3)])
    assert center.mark_all_read() == 2
    assert center.unread_count() == 0

    center.add(make_notification(4))
    assert center.get(4).is_read is False
    assert center.unread_count() == 1


def test_delete_is_permanent_and_idempotent():
    center = NotificationCenter([make_notification(1), make_notification(2)])
    assert center.delete(1) is True
    assert center.get(1) is None
    assert [n.id for n in center.list()] == [2]

    assert center.delete(1) is False
    assert center.mark_read(1) is False
    assert center.unread_count() == 1


def test_duplicate_ids_rejected():
    center = NotificationCenter([make_notification(1)])
    with pytest.raises(ValueError):
        center.add(make_notification(1))


def test_sort_by_priority():
    notifications = [
        make_notification(1, priority=Priority.LOW, hours_ago=1),
        make_notification(2, priority=Priority.HIGH, hours_ago=5),
        make_notification(3, priority=Priority.MEDIUM, hours_ago=2),
        make_notification(4, priority=Priority.HIGH, hours_ago=1),
    ]
    assert [n.id for n in sort_by_priority(notifications)] == [4, 2, 3, 1]
