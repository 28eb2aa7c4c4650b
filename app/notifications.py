"""Notification display classification, read/delete commands and time labels."""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from app.models import Notification, NotificationType, Priority

logger = logging.getLogger(__name__)

# type -> (icon, badge color)
TYPE_DISPLAY: Dict[NotificationType, Dict[str, str]] = {
    NotificationType.DEADLINE: {'icon': 'calendar', 'color': 'warning'},
    NotificationType.SCHEDULING: {'icon': 'clock', 'color': 'default'},
    NotificationType.AT_RISK: {'icon': 'alert-triangle', 'color': 'destructive'},
    NotificationType.MISSED_COUNSELING: {'icon': 'users', 'color': 'warning'},
    NotificationType.SYSTEM: {'icon': 'bell', 'color': 'secondary'},
    NotificationType.ACHIEVEMENT: {'icon': 'check-circle', 'color': 'success'},
}

PRIORITY_COLORS: Dict[Priority, str] = {
    Priority.HIGH: 'destructive',
    Priority.MEDIUM: 'warning',
    Priority.LOW: 'success',
}

PRIORITY_RANK: Dict[Priority, int] = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}

for _table, _enum in ((TYPE_DISPLAY, NotificationType), (PRIORITY_COLORS, Priority), (PRIORITY_RANK, Priority)):
    _missing = set(_enum) - set(_table)
    if _missing:
        raise RuntimeError(f"Display table missing entries for: {sorted(m.value for m in _missing)}")


def display_for(notification_type: NotificationType) -> Dict[str, str]:
    return TYPE_DISPLAY[notification_type]


def format_relative_time(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """
    Human-friendly age of a notification.

    "Just now" under an hour, "<n>h ago" up to 23 hours, "<n>d ago" up to
    six days, then the calendar date (M/D/YYYY). Hours and days are
    floored, so exactly 24 hours reads "1d ago".
    """
    if now is None:
        now = datetime.now(timestamp.tzinfo)
    diff_hours = int((now - timestamp).total_seconds() // 3600)
    diff_days = diff_hours // 24

    if diff_hours < 1:
        return "Just now"
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    if diff_days < 7:
        return f"{diff_days}d ago"
    return f"{timestamp.month}/{timestamp.day}/{timestamp.year}"


def sort_by_priority(notifications: Iterable[Notification]) -> List[Notification]:
    """High priority first, newest first within a priority."""
    by_time = sorted(notifications, key=lambda n: n.timestamp, reverse=True)
    return sorted(by_time, key=lambda n: PRIORITY_RANK[n.priority])


class NotificationCenter:
    """
    Owns the notification collection.

    Commands on unknown ids are no-ops that return False: the view may
    race a delete against a read and neither should fail.
    """

    def __init__(self, notifications: Iterable[Notification] = ()):
        self._items: Dict[int, Notification] = {}
        for notification in notifications:
            self.add(notification)

    def add(self, notification: Notification):
        if notification.id in self._items:
            raise ValueError(f"Duplicate notification id {notification.id}")
        self._items[notification.id] = notification

    def get(self, notification_id: int) -> Optional[Notification]:
        return self._items.get(notification_id)

    def list(self) -> List[Notification]:
        return list(self._items.values())

    def mark_read(self, notification_id: int) -> bool:
        notification = self._items.get(notification_id)
        if notification is None or notification.is_read:
            return False
        self._items[notification_id] = notification.model_copy(update={'is_read': True})
        return True

    def mark_all_read(self) -> int:
        """Mark everything currently held as read; returns how many changed."""
        changed = 0
        for notification_id in list(self._items):
            if self.mark_read(notification_id):
                changed += 1
        logger.info("Marked %d notifications as read", changed)
        return changed

    def delete(self, notification_id: int) -> bool:
        removed = self._items.pop(notification_id, None)
        if removed is not None:
            logger.info("Deleted notification %d", notification_id)
        return removed is not None

    def unread_count(self) -> int:
        return sum(1 for n in self._items.values() if not n.is_read)
