"""Counseling outreach: who needs a session, and a draft invitation per risk level."""

from typing import Dict

from app.config import get_settings
from app.models import RiskLevel, Student


def needs_counseling(student: Student) -> bool:
    """High risk, or never seen by a counselor."""
    return student.last_session == "Never" or student.assessment.level == RiskLevel.HIGH


def get_advisor_info() -> Dict[str, str]:
    """Get advisor name and email from settings."""
    settings = get_settings()
    return {
        'name': settings.advisor_name,
        'email': settings.advisor_email,
    }


def generate_email_draft(student: Student) -> Dict[str, str]:
    """Generate a counseling invitation tailored to the student's risk level."""
    advisor = get_advisor_info()
    concerns = "\n".join(f"- {reason}" for reason in student.assessment.reasons)
    level = student.assessment.level
    if level == RiskLevel.HIGH:
        return _high_risk_email(student, concerns, advisor)
    if level == RiskLevel.MEDIUM:
        return _medium_risk_email(student, concerns, advisor)
    return _low_risk_email(student, advisor)


def _low_risk_email(student: Student, advisor: Dict[str, str]) -> Dict[str, str]:
    subject = f"Great Work, {student.name} - Keep It Up!"
    body = f"""Hi {student.name},

You're maintaining a strong record in {student.branch}, with {student.factors.attendance:g}% attendance.

If you'd like, we can talk about peer mentoring or leadership programs you could join.

{advisor['name']}
{advisor['email']}"""
    return {'subject': subject, 'body': body}


def _medium_risk_email(student: Student, concerns: str, advisor: Dict[str, str]) -> Dict[str, str]:
    subject = f"Let's Check In, {student.name}"
    body = f"""Hi {student.name},

I'd like to schedule a counseling session within the next two weeks. A few things I'd like to go over with you:

{concerns}

Please reply with a time that works for you.

{advisor['name']}
{advisor['email']}"""
    return {'subject': subject, 'body': body}


def _high_risk_email(student: Student, concerns: str, advisor: Dict[str, str]) -> Dict[str, str]:
    subject = f"Let's Work Together to Get You Back on Track, {student.name}"
    body = f"""Hi {student.name},

I'm reaching out about your current progress in {student.branch}. Some recent indicators concern me:

{concerns}

Please contact me as soon as possible so we can set up a counseling session and put a support plan in place.

You're not alone in this - we're here to help you get back on track.

{advisor['name']}
{advisor['email']}"""
    return {'subject': subject, 'body': body}
