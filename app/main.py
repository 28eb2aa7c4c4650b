"""FastAPI application for the Student Risk Dashboard."""

import logging
import traceback
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.email_templates import generate_email_draft
from app.errors import ExportError, RosterError
from app.export import ExportFormat, export_report
from app.filters import ALL, NotificationQuery, StudentQuery
from app.logging_config import setup_logging
from app.models import (
    CommandResponse,
    EmailDraftResponse,
    NotificationView,
    RiskAssessment,
    RiskFactors,
    StudentSummary,
    TrendPoint,
    UploadResponse,
)
from app.parsers import load_roster
from app.risk import classify
from app.sample_data import build_sample_store
from app.store import DashboardStore, summarize

setup_logging()
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Student Risk Dashboard", version="1.0.0")
app.state.store = build_sample_store()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON."""
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(ExportError)
async def export_exception_handler(request: Request, exc: ExportError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON."""
    error_detail = str(exc)
    if settings.debug:
        error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"
    logger.error("Unhandled error on %s: %s", request.url.path, exc)

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {error_detail}",
            "type": type(exc).__name__
        }
    )


def get_store(request: Request) -> DashboardStore:
    return request.app.state.store


@app.get("/health")
async def health_check():
    """Health check endpoint to test server connectivity."""
    return JSONResponse(content={"status": "ok", "message": "Server is running"})


@app.post("/classify", response_model=RiskAssessment)
async def classify_factors(factors: RiskFactors):
    """Score a set of risk factors without storing anything."""
    return classify(factors)


@app.get("/students", response_model=List[StudentSummary])
async def list_students(
    request: Request,
    q: Optional[str] = None,
    branch: Optional[str] = ALL,
    at_risk_only: bool = True,
    sort: bool = False,
):
    """Search the roster. Defaults to at-risk students only."""
    store = get_store(request)
    query = StudentQuery(text=q, branch=branch, at_risk_only=at_risk_only)
    return [summarize(s) for s in store.query_students(query, sort=sort)]


@app.get("/students/summary")
async def student_summary(request: Request):
    """Count of students per risk level."""
    return get_store(request).level_summary()


@app.get("/students/{student_id}")
async def get_student(request: Request, student_id: int):
    student = get_store(request).get_student(student_id)
    if student is None:
        raise HTTPException(status_code=404, detail=f"Student {student_id} not found")
    return student.model_dump(mode="json")


@app.get("/students/{student_id}/trend", response_model=List[TrendPoint])
async def get_student_trend(request: Request, student_id: int):
    """Monthly risk trend; empty for students with no history."""
    return get_store(request).student_trend(student_id)


@app.get("/students/{student_id}/attendance-trend", response_model=List[TrendPoint])
async def get_attendance_trend(request: Request, student_id: int):
    return get_store(request).attendance_trend(student_id)


@app.get("/students/{student_id}/counseling-draft", response_model=EmailDraftResponse)
async def counseling_draft(request: Request, student_id: int):
    """Draft a counseling invitation for a student."""
    student = get_store(request).get_student(student_id)
    if student is None:
        raise HTTPException(status_code=404, detail=f"Student {student_id} not found")
    return EmailDraftResponse(**generate_email_draft(student))


@app.get("/trends/cohort")
async def cohort_trend(request: Request):
    """Per-period High/Medium/Low counts for the stacked distribution chart."""
    return get_store(request).cohort_distribution()


@app.post("/upload", response_model=UploadResponse)
async def upload_roster(
    request: Request,
    file: UploadFile = File(...),
    period: Optional[str] = Form(None),
):
    """Replace the roster from a CSV/Excel upload; optionally snapshot scores at a period."""
    file_bytes = await file.read()
    if len(file_bytes) > settings.max_upload_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_size_mb}MB"
        )

    store = get_store(request)
    try:
        students = load_roster(file_bytes, file.filename or "")
        if period is not None and period not in store.risk_trends.periods:
            raise RosterError(f"Unknown period '{period}'. Expected one of {store.risk_trends.periods}")
        store.replace_students(students, period=period)
    except ValueError as e:
        logger.warning("Roster upload rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    summary = store.level_summary()
    logger.info(
        "Results: %d students (%d High, %d Medium, %d Low)",
        summary['Total'], summary['High'], summary['Medium'], summary['Low'],
    )
    return UploadResponse(
        success=True,
        message=f"Successfully processed {len(students)} students",
        results=[summarize(s) for s in store.query_students(StudentQuery(at_risk_only=False), sort=True)],
        summary=summary,
    )


@app.get("/notifications", response_model=List[NotificationView])
async def list_notifications(
    request: Request,
    type: Optional[str] = ALL,
    status: str = Query(ALL, pattern="^(all|read|unread)$"),
    sort: bool = False,
):
    """Filtered alerts; with sort=true, high priority and newest first."""
    store = get_store(request)
    try:
        query = NotificationQuery(type=type, status=status)
        return store.query_notifications(query, now=datetime.now(), sort=sort)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/notifications/unread-count")
async def unread_count(request: Request):
    return {"unread_count": get_store(request).notifications.unread_count()}


@app.post("/notifications/read-all", response_model=CommandResponse)
async def mark_all_read(request: Request):
    center = get_store(request).notifications
    changed = center.mark_all_read()
    return CommandResponse(changed=changed > 0, unread_count=center.unread_count())


@app.post("/notifications/{notification_id}/read", response_model=CommandResponse)
async def mark_read(request: Request, notification_id: int):
    center = get_store(request).notifications
    changed = center.mark_read(notification_id)
    return CommandResponse(changed=changed, unread_count=center.unread_count())


@app.delete("/notifications/{notification_id}", response_model=CommandResponse)
async def delete_notification(request: Request, notification_id: int):
    center = get_store(request).notifications
    changed = center.delete(notification_id)
    return CommandResponse(changed=changed, unread_count=center.unread_count())


@app.get("/reports/risk.{fmt}")
async def download_risk_report(
    request: Request,
    fmt: ExportFormat,
    q: Optional[str] = None,
    branch: Optional[str] = ALL,
    at_risk_only: bool = False,
):
    """Download the risk analysis report for the selected students as CSV or PDF."""
    report = get_store(request).risk_report(StudentQuery(text=q, branch=branch, at_risk_only=at_risk_only))
    artifact = await export_report(report, fmt)
    return StreamingResponse(
        iter([artifact.content]),
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f"attachment; filename={artifact.filename}"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
