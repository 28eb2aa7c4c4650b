"""Student search/filter and notification filtering."""

from typing import Iterable, List, Optional

from pydantic import BaseModel

from app.models import Notification, NotificationType, Student
from app.risk import is_at_risk

ALL = "all"


class StudentQuery(BaseModel):
    text: Optional[str] = None
    branch: Optional[str] = None
    at_risk_only: bool = True


class NotificationQuery(BaseModel):
    type: Optional[str] = None
    status: str = ALL


def _matches_text(student: Student, text: Optional[str]) -> bool:
    if not text:
        return True
    needle = text.lower()
    return needle in student.name.lower() or needle in student.roll_no.lower()


def filter_students(students: Iterable[Student], query: StudentQuery) -> List[Student]:
    """
    Narrow a student collection by text, branch and risk.

    Text is a case-insensitive substring of name or roll number, branch is
    an exact match ("all" or None matches everything), and at_risk_only
    drops Low-risk students. Input order is kept.
    """
    return [
        student for student in students
        if _matches_text(student, query.text)
        and (not query.branch or query.branch == ALL or student.branch == query.branch)
        and (not query.at_risk_only or is_at_risk(student.assessment))
    ]


def sort_by_score(students: Iterable[Student]) -> List[Student]:
    """Highest risk first; equal scores keep their original order."""
    return sorted(students, key=lambda s: -s.assessment.score)


def find_student(students: Iterable[Student], student_id: int) -> Optional[Student]:
    return next((s for s in students if s.id == student_id), None)


def filter_notifications(notifications: Iterable[Notification], query: NotificationQuery) -> List[Notification]:
    """Filter by type and read status (all/read/unread), keeping input order."""
    if query.status not in (ALL, "read", "unread"):
        raise ValueError(f"Unknown notification status filter: {query.status}")
    wanted_type = None
    if query.type and query.type != ALL:
        wanted_type = NotificationType(query.type)

    result = []
    for notification in notifications:
        if wanted_type is not None and notification.type != wanted_type:
            continue
        if query.status == "read" and not notification.is_read:
            continue
        if query.status == "unread" and notification.is_read:
            continue
        result.append(notification)
    return result
