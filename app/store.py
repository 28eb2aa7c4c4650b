"""In-memory owner of the dashboard's students, notifications and trends."""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from app.email_templates import needs_counseling
from app.export import build_risk_report
from app.filters import NotificationQuery, StudentQuery, filter_notifications, filter_students, find_student, sort_by_score
from app.models import (
    Notification,
    NotificationView,
    ReportRequest,
    RiskLevel,
    Student,
    StudentSummary,
    TrendPoint,
)
from app.notifications import PRIORITY_COLORS, NotificationCenter, display_for, format_relative_time, sort_by_priority
from app.trends import TrendTracker

logger = logging.getLogger(__name__)


def summarize(student: Student) -> StudentSummary:
    return StudentSummary(
        id=student.id,
        name=student.name,
        roll_no=student.roll_no,
        branch=student.branch,
        risk_score=student.assessment.score,
        risk_level=student.assessment.level,
        last_session=student.last_session,
        needs_counseling=needs_counseling(student),
    )


class DashboardStore:
    """
    Single owner of the mutable collections.

    Queries go through the pure functions in ``app.filters``; the only
    mutations are the notification commands and a roster replacement.
    """

    def __init__(
        self,
        students: Iterable[Student] = (),
        notifications: Optional[NotificationCenter] = None,
        risk_trends: Optional[TrendTracker] = None,
        attendance_trends: Optional[TrendTracker] = None,
    ):
        self._students: List[Student] = []
        self.notifications = notifications or NotificationCenter()
        self.risk_trends = risk_trends or TrendTracker([])
        self.attendance_trends = attendance_trends or TrendTracker([])
        self.replace_students(students)

    # Students

    def students(self) -> List[Student]:
        return list(self._students)

    def replace_students(self, students: Iterable[Student], period: Optional[str] = None):
        """Swap in a new roster; optionally snapshot every score at ``period``."""
        students = list(students)
        seen = set()
        for student in students:
            if student.id in seen:
                raise ValueError(f"Duplicate student id {student.id}")
            seen.add(student.id)
        self._students = students
        if period is not None:
            for student in students:
                self.risk_trends.record(student.id, period, student.assessment.score)
        logger.info("Roster now holds %d students", len(students))

    def get_student(self, student_id: int) -> Optional[Student]:
        return find_student(self._students, student_id)

    def query_students(self, query: StudentQuery, sort: bool = False) -> List[Student]:
        selected = filter_students(self._students, query)
        return sort_by_score(selected) if sort else selected

    def level_summary(self, students: Optional[Iterable[Student]] = None) -> Dict[str, int]:
        students = self._students if students is None else list(students)
        summary = {level.value: 0 for level in RiskLevel}
        for student in students:
            summary[student.assessment.level.value] += 1
        summary['Total'] = len(students)
        return summary

    def student_trend(self, student_id: int) -> List[TrendPoint]:
        return self.risk_trends.series(student_id)

    def attendance_trend(self, student_id: int) -> List[TrendPoint]:
        return self.attendance_trends.series(student_id)

    def cohort_distribution(self):
        return self.risk_trends.cohort_distribution([s.id for s in self._students])

    def risk_report(self, query: StudentQuery) -> ReportRequest:
        """Snapshot of the currently selected students, highest risk first."""
        selected = self.query_students(query, sort=True)
        return build_risk_report(selected, filters=query.model_dump())

    # Notifications

    def student_name(self, student_id: Optional[int]) -> Optional[str]:
        if student_id is None:
            return None
        student = self.get_student(student_id)
        return student.name if student else None

    def present(self, notification: Notification, now: Optional[datetime] = None) -> NotificationView:
        display = display_for(notification.type)
        return NotificationView(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            timestamp=notification.timestamp,
            relative_time=format_relative_time(notification.timestamp, now),
            is_read=notification.is_read,
            priority=notification.priority,
            student_name=self.student_name(notification.student_id),
            action_required=notification.action_required,
            icon=display['icon'],
            color=display['color'],
            priority_color=PRIORITY_COLORS[notification.priority],
        )

    def query_notifications(
        self, query: NotificationQuery, now: Optional[datetime] = None, sort: bool = False
    ) -> List[NotificationView]:
        selected = filter_notifications(self.notifications.list(), query)
        if sort:
            selected = sort_by_priority(selected)
        return [self.present(n, now) for n in selected]
