"""Report export: flatten rows and render them as CSV or a paginated PDF."""

import asyncio
import csv
import io
import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional
from xml.sax.saxutils import escape

import numpy as np
from pydantic import BaseModel
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.errors import ExportError
from app.models import ReportArtifact, ReportRequest, Student

logger = logging.getLogger(__name__)

RISK_REPORT_TITLE = "Student Risk Prediction Report"
RISK_REPORT_COLUMNS = [
    'name',
    'roll_no',
    'branch',
    'risk_level',
    'risk_score',
    'attendance',
    'academic_performance',
    'fee_payment',
    'engagement',
]


class ExportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.PDF: "application/pdf",
}


def _leaf_paths(record: Mapping[str, Any], prefix: str = '') -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    for key, value in record.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if isinstance(value, Mapping):
            paths.update(_leaf_paths(value, path))
        else:
            paths[path] = value
    return paths


def _column_names(paths: Iterable[str]) -> Dict[str, str]:
    """
    Map dotted leaf paths to column names.

    Top-level keys keep their own name. A nested path is named by its leaf
    key only when no other path shares that leaf; otherwise it keeps the
    dotted path.
    """
    paths = list(dict.fromkeys(paths))
    leaf_counts: Dict[str, int] = {}
    for path in paths:
        leaf = path.rsplit('.', 1)[-1]
        leaf_counts[leaf] = leaf_counts.get(leaf, 0) + 1
    names = {}
    for path in paths:
        leaf = path.rsplit('.', 1)[-1]
        names[path] = leaf if '.' not in path or leaf_counts[leaf] == 1 else path
    return names


def flatten_records(records: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Lift nested mappings into top-level columns named by their leaf key.

    ``{'factors': {'attendance': 65}}`` becomes ``{'attendance': 65}``.
    Names are decided over every row together, so a value lands under the
    same column in each row whatever the key order.
    """
    leaf_rows = [_leaf_paths(record) for record in records]
    names = _column_names(path for row in leaf_rows for path in row)
    return [{names[path]: value for path, value in row.items()} for row in leaf_rows]


def format_value(value: Any) -> str:
    """Render a cell: plain decimals for numbers, enum values, empty for None."""
    if value is None:
        return ''
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return np.format_float_positional(float(value), trim='-')
    return str(value)


def resolve_columns(rows: List[Dict[str, Any]], columns: Optional[List[str]] = None) -> List[str]:
    """Explicit column order if given, else order of first appearance."""
    if columns:
        return list(columns)
    ordered: List[str] = []
    for row in rows:
        for key in row:
            if key not in ordered:
                ordered.append(key)
    return ordered


def _table_data(request: ReportRequest):
    rows = flatten_records(request.rows)
    columns = resolve_columns(rows, request.columns)
    body = [[format_value(row.get(column)) for column in columns] for row in rows]
    return columns, body


def render_csv(request: ReportRequest) -> bytes:
    """Header row plus one line per record, quoted where needed."""
    columns, body = _table_data(request)
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(columns)
    writer.writerows(body)
    return output.getvalue().encode('utf-8')


def render_pdf(request: ReportRequest, generated_at: Optional[datetime] = None) -> bytes:
    """
    Titled tabular document. The header row repeats on every page the
    table spills onto; title and timestamp appear once at the top.
    """
    columns, body = _table_data(request)
    generated_at = generated_at or datetime.now()

    buffer = io.BytesIO()
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(A4),
        leftMargin=28, rightMargin=28, topMargin=28, bottomMargin=28,
        title=request.title,
    )
    elements = [
        Paragraph(escape(request.title), styles["Title"]),
        Paragraph(f"Generated: {generated_at:%Y-%m-%d %H:%M}", styles["Normal"]),
        Spacer(1, 12),
    ]
    if columns:
        table = Table([columns] + body, hAlign="LEFT", repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
        ]))
        elements.append(table)
    doc.build(elements)
    pdf_value = buffer.getvalue()
    buffer.close()
    return pdf_value


RENDERERS = {
    ExportFormat.CSV: render_csv,
    ExportFormat.PDF: render_pdf,
}


def report_filename(title: str, fmt: ExportFormat, day: Optional[datetime] = None) -> str:
    slug = re.sub(r'[^a-z0-9]+', '_', title.lower()).strip('_') or 'report'
    day = day or datetime.now()
    return f"{slug}_{day:%Y-%m-%d}.{fmt.value}"


async def export_report(request: ReportRequest, fmt: ExportFormat) -> ReportArtifact:
    """
    Produce a downloadable artifact for ``request``.

    Rendering runs off the event loop. Any failure surfaces as
    ExportError and no artifact is returned.
    """
    try:
        fmt = ExportFormat(fmt)
        content = await asyncio.to_thread(RENDERERS[fmt], request)
    except Exception as e:
        logger.exception("Export of '%s' as %s failed", request.title, fmt)
        raise ExportError(f"Failed to generate report: {e}") from e

    logger.info("Exported '%s' as %s (%d rows, %d bytes)", request.title, fmt.value, len(request.rows), len(content))
    return ReportArtifact(
        filename=report_filename(request.title, fmt),
        media_type=MEDIA_TYPES[fmt],
        content=content,
    )


def student_report_row(student: Student) -> Dict[str, Any]:
    return {
        'name': student.name,
        'roll_no': student.roll_no,
        'branch': student.branch,
        'risk_level': student.assessment.level,
        'risk_score': student.assessment.score,
        'factors': student.factors,
    }


def build_risk_report(students: Iterable[Student], filters: Optional[Dict[str, Any]] = None) -> ReportRequest:
    """Standard risk-analysis report for the currently selected students."""
    return ReportRequest(
        title=RISK_REPORT_TITLE,
        rows=[student_report_row(s) for s in students],
        report_type="risk-analysis",
        filters=filters or {},
        columns=RISK_REPORT_COLUMNS,
    )
