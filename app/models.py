"""Data models for the Student Risk Dashboard."""

import copy
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskLevel(str, Enum):
    """Coarse risk classification derived from a risk score."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskFactors(BaseModel):
    """Raw per-student risk signals, each a 0-100 percentage."""
    model_config = ConfigDict(frozen=True)

    attendance: float = Field(ge=0, le=100)
    academic_performance: float = Field(ge=0, le=100)
    fee_payment: float = Field(ge=0, le=100)
    engagement: float = Field(ge=0, le=100)


class RiskAssessment(BaseModel):
    """Derived score, level and explanation. Recomputed as a whole, never edited."""
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=100)
    level: RiskLevel
    reasons: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: str
    value: float


class Student(BaseModel):
    """A student with their current risk factors and assessment."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    roll_no: str
    branch: str
    factors: RiskFactors
    assessment: RiskAssessment
    last_session: str = "Never"

    @classmethod
    def from_factors(cls, factors: RiskFactors, **fields: Any) -> "Student":
        """Build a student whose assessment is derived from ``factors``."""
        from app.risk import classify

        return cls(factors=factors, assessment=classify(factors), **fields)

    def with_factors(self, factors: RiskFactors) -> "Student":
        """Return a copy carrying new factors and a freshly computed assessment."""
        from app.risk import classify

        return self.model_copy(update={"factors": factors, "assessment": classify(factors)})


class NotificationType(str, Enum):
    DEADLINE = "deadline"
    SCHEDULING = "scheduling"
    AT_RISK = "at-risk"
    MISSED_COUNSELING = "missed-counseling"
    SYSTEM = "system"
    ACHIEVEMENT = "achievement"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Notification(BaseModel):
    """
    A counselor-facing alert.

    ``student_id`` is a display-only back reference; the name shown next to
    the alert is looked up from the store and is simply absent when the
    student is unknown.
    """
    id: int
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    is_read: bool = False
    priority: Priority = Priority.LOW
    student_id: Optional[int] = None
    action_required: bool = False


class ReportRequest(BaseModel):
    """Immutable snapshot of the data to export."""
    model_config = ConfigDict(frozen=True)

    title: str
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    report_type: str = "risk-analysis"
    filters: Dict[str, Any] = Field(default_factory=dict)
    columns: Optional[List[str]] = None

    @field_validator("rows", "filters", mode="before")
    @classmethod
    def _snapshot(cls, value):
        # Detach from the caller's objects so later edits don't leak into the report
        return copy.deepcopy(value)


class ReportArtifact(BaseModel):
    filename: str
    media_type: str
    content: bytes


class StudentSummary(BaseModel):
    """Student row as returned to the dashboard view."""
    id: int
    name: str
    roll_no: str
    branch: str
    risk_score: float
    risk_level: RiskLevel
    last_session: str
    needs_counseling: bool


class NotificationView(BaseModel):
    """Notification decorated with display attributes for the view."""
    id: int
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    relative_time: str
    is_read: bool
    priority: Priority
    student_name: Optional[str] = None
    action_required: bool
    icon: str
    color: str
    priority_color: str


class CommandResponse(BaseModel):
    changed: bool
    unread_count: int


class UploadResponse(BaseModel):
    """Response from roster upload endpoint."""
    success: bool
    message: str
    results: List[StudentSummary]
    summary: Dict[str, int]


class EmailDraftResponse(BaseModel):
    """Counseling outreach draft."""
    subject: str
    body: str
