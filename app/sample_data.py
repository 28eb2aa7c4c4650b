"""Static seed collection used until a roster is uploaded."""

from datetime import datetime

from app.config import get_settings
from app.models import Notification, NotificationType, Priority, RiskFactors, RiskLevel, Student, TrendPoint
from app.notifications import NotificationCenter
from app.store import DashboardStore
from app.trends import TrendTracker

WEEKS = ["Week 1", "Week 2", "Week 3", "Week 4", "Week 5", "Week 6"]

STUDENT_ROWS = [
    # id, name, roll_no, branch, (attendance, academic, fee, engagement), last session
    (1, "Alice Johnson", "CS21001", "CSE", (65, 68, 40, 55), "2 days ago"),
    (2, "Bob Smith", "CS21002", "CSE", (78, 72, 90, 65), "1 week ago"),
    (3, "Carol Davis", "CS21003", "CSE", (92, 88, 100, 85), "1 month ago"),
    (4, "Priya Sharma", "CSE21001", "CSE", (65, 45, 80, 30), "2 days ago"),
    (5, "Rahul Kumar", "ECE21045", "ECE", (75, 62, 85, 60), "1 week ago"),
    (6, "Anjali Singh", "IT21023", "IT", (70, 58, 70, 50), "Never"),
    (7, "Vikash Gupta", "MECH21012", "MECH", (90, 84, 100, 80), "1 month ago"),
    (8, "Sneha Patel", "CSE21089", "CSE", (55, 50, 60, 35), "Never"),
    (9, "David Wilson", "CS21004", "CSE", (95, 85, 100, 80), "3 weeks ago"),
    (10, "Eva Brown", "CS21005", "CSE", (68, 74, 85, 70), "Never"),
]

MONTHLY_RISK = {
    1: [45, 52, 61, 73, 85],
    2: [38, 40, 43, 45, 46.2],
    3: [24, 22, 20, 18, 16.8],
}

WEEKLY_ATTENDANCE = {
    4: [85, 78, 65, 60, 55, 45],
}

COLLEGE_DISTRIBUTION = [
    ("Jan", 12, 28, 85),
    ("Feb", 15, 32, 88),
    ("Mar", 18, 35, 82),
    ("Apr", 22, 38, 78),
    ("May", 25, 42, 75),
]

NOTIFICATION_ROWS = [
    dict(id=1, type=NotificationType.AT_RISK, title="High Risk Student Alert",
         message="Alice Johnson has been identified as high-risk for dropout. Immediate intervention required.",
         timestamp=datetime(2024, 1, 15, 10, 30), priority=Priority.HIGH, student_id=1, action_required=True),
    dict(id=2, type=NotificationType.MISSED_COUNSELING, title="Missed Counseling Session",
         message="Bob Smith missed his scheduled counseling session on Jan 14, 2024 at 4:30 PM.",
         timestamp=datetime(2024, 1, 14, 17, 0), priority=Priority.MEDIUM, student_id=2, action_required=True),
    dict(id=3, type=NotificationType.DEADLINE, title="Assignment Submission Deadline",
         message="Student progress reports submission deadline is approaching in 3 days (Jan 18, 2024).",
         timestamp=datetime(2024, 1, 15, 9, 0), is_read=True, priority=Priority.MEDIUM),
    dict(id=4, type=NotificationType.SCHEDULING, title="New Counseling Session Requested",
         message="Carol Davis has requested a counseling session for academic support.",
         timestamp=datetime(2024, 1, 15, 8, 45), priority=Priority.LOW, student_id=3, action_required=True),
    dict(id=5, type=NotificationType.ACHIEVEMENT, title="Student Achievement",
         message="David Wilson achieved 95% attendance this month. Consider recognition.",
         timestamp=datetime(2024, 1, 14, 16, 20), is_read=True, priority=Priority.LOW, student_id=9),
    dict(id=6, type=NotificationType.SYSTEM, title="System Maintenance",
         message="Scheduled system maintenance on Jan 16, 2024 from 2:00 AM to 4:00 AM.",
         timestamp=datetime(2024, 1, 13, 15, 0), is_read=True, priority=Priority.LOW),
    dict(id=7, type=NotificationType.AT_RISK, title="Attendance Warning",
         message="Eva Brown's attendance has dropped below 70%. Consider scheduling a meeting.",
         timestamp=datetime(2024, 1, 13, 11, 30), priority=Priority.MEDIUM, student_id=10, action_required=True),
]


def sample_students():
    return [
        Student.from_factors(
            RiskFactors(attendance=a, academic_performance=p, fee_payment=f, engagement=e),
            id=student_id, name=name, roll_no=roll_no, branch=branch, last_session=last_session,
        )
        for student_id, name, roll_no, branch, (a, p, f, e), last_session in STUDENT_ROWS
    ]


def _points(periods, values):
    return [TrendPoint(period=period, value=value) for period, value in zip(periods, values)]


def build_sample_store() -> DashboardStore:
    """Store seeded with the demo roster, alerts and trend history."""
    risk_trends = TrendTracker(get_settings().trend_periods)
    for student_id, values in MONTHLY_RISK.items():
        risk_trends.record_series(student_id, _points(risk_trends.periods, values))
    for period, high, medium, low in COLLEGE_DISTRIBUTION:
        if period in risk_trends.periods:
            risk_trends.load_distribution(
                period, {RiskLevel.HIGH: high, RiskLevel.MEDIUM: medium, RiskLevel.LOW: low}
            )

    attendance_trends = TrendTracker(WEEKS)
    for student_id, values in WEEKLY_ATTENDANCE.items():
        attendance_trends.record_series(student_id, _points(WEEKS, values))

    return DashboardStore(
        students=sample_students(),
        notifications=NotificationCenter(Notification(**row) for row in NOTIFICATION_ROWS),
        risk_trends=risk_trends,
        attendance_trends=attendance_trends,
    )
