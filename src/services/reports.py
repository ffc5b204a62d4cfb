"""
Report generation: Excel workbooks and PDF summaries of the roster and events.
"""

import io
import re
import sqlite3
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from core.config import CATEGORY_HEADERS, EVENT_HEADERS, USER_HEADERS
from core.database import (
    list_categories,
    list_events_in_month,
    list_events_in_range,
    list_users,
)
from core.timeutils import format_date_display

REPORT_TYPES = ("weekly", "monthly")
REPORT_FORMATS = ("xlsx", "pdf")
ALL_DEPARTMENTS = "All"


@dataclass
class ReportData:
    """Everything a report file is built from."""

    report_type: str
    department: str  # "All" or a department tag
    period_label: str
    categories: list[dict] = field(default_factory=list)
    users: list[dict] = field(default_factory=list)
    events: list[dict] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"Events Report ({self.report_type.upper()}) - Department: {self.department}"


# =============================================================================
# PERIOD PARSING
# =============================================================================


def parse_weekly_period(start: str | None, end: str | None) -> tuple[date, date]:
    """Parse YYYY-MM-DD start/end dates."""
    if not start or not end:
        raise ValueError("Start and end dates are required for weekly reports.")
    try:
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
    except ValueError:
        raise ValueError("Dates must use the format YYYY-MM-DD.")
    if end_date < start_date:
        raise ValueError("End date must not be before start date.")
    return start_date, end_date


def parse_monthly_period(start: str | None, end: str | None) -> tuple[int, int]:
    """Monthly reports pass the month (1-12) as start and the year as end."""
    if not start or not end:
        raise ValueError("Month and year are required for monthly reports.")
    try:
        month = int(start)
        year = int(end)
    except ValueError:
        raise ValueError("Month and year must be numbers.")
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12.")
    if not 1900 <= year <= 9999:
        raise ValueError("Year is out of range.")
    return month, year


# =============================================================================
# DATA COLLECTION
# =============================================================================


def _in_department(values: list[str], department: str) -> bool:
    wanted = department.strip().lower()
    return any(v.strip().lower() == wanted for v in values)


def collect_report_data(
    conn: sqlite3.Connection,
    report_type: str,
    department: str,
    start: str | None,
    end: str | None,
) -> ReportData:
    """
    Load categories, users and events for a report.

    department is either "All" or a single department tag; events match when
    their department list contains it.
    """
    if report_type not in REPORT_TYPES:
        raise ValueError(f"Unknown report type '{report_type}'.")

    if report_type == "monthly":
        month, year = parse_monthly_period(start, end)
        events = list_events_in_month(conn, month, year)
        period_label = date(year, month, 1).strftime("%B %Y")
    else:
        start_date, end_date = parse_weekly_period(start, end)
        events = list_events_in_range(conn, start_date.isoformat(), end_date.isoformat())
        period_label = f"{format_date_display(start_date)} - {format_date_display(end_date)}"

    if department == ALL_DEPARTMENTS:
        categories = list_categories(conn)
        users = list_users(conn)
    else:
        categories = list_categories(conn, department)
        users = [u for u in list_users(conn) if u["type"].lower() == department.lower()]
        events = [e for e in events if _in_department(e["department"], department)]

    return ReportData(
        report_type=report_type,
        department=department,
        period_label=period_label,
        categories=categories,
        users=users,
        events=events,
    )


def report_filename(report_type: str, department: str, fmt: str, now: datetime | None = None) -> str:
    """File name safe for a Content-Disposition header and the filesystem."""
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    safe_department = re.sub(r"[^A-Za-z0-9_-]+", "_", department).strip("_") or "department"
    return f"report_{report_type}_{safe_department}_{stamp}.{fmt}"


# =============================================================================
# EXCEL
# =============================================================================


def _write_sheet(ws, headers: list[str], rows: list[list]):
    """Bold header row, data rows, and column widths sized to content."""
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(row, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    for col_idx, header in enumerate(headers, start=1):
        longest = max([len(str(header))] + [len(str(r[col_idx - 1] or "")) for r in rows])
        ws.column_dimensions[get_column_letter(col_idx)].width = min(longest + 2, 60)


def create_excel_report(data: ReportData) -> bytes:
    """
    Create an Excel workbook with three sheets.

    Sheet 1: "Categories" - ID Number, Office, Email, Department
    Sheet 2: "Users" - ID, Employee Number, Email, Type
    Sheet 3: "Events" - one row per event, arrays joined with ", "
    """
    wb = Workbook()

    ws_categories = wb.active
    ws_categories.title = "Categories"
    _write_sheet(
        ws_categories,
        CATEGORY_HEADERS,
        [[c["idnumber"], c["office"], c["email"], c["department"]] for c in data.categories],
    )

    ws_users = wb.create_sheet(title="Users")
    _write_sheet(
        ws_users,
        USER_HEADERS,
        [[u["id"], u["employee_number"], u["email"], u["type"]] for u in data.users],
    )

    ws_events = wb.create_sheet(title="Events")
    _write_sheet(
        ws_events,
        EVENT_HEADERS,
        [
            [
                e["id"],
                e["program"],
                e["start_date"],
                e["start_time"],
                e["end_date"],
                e["end_time"],
                e["purpose"],
                ", ".join(e["participants"]),
                ", ".join(e["department"]),
                e["status"],
                e["created_by"] or "",
                e["created_at"] or "",
            ]
            for e in data.events
        ],
    )

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# =============================================================================
# PDF
# =============================================================================


def create_pdf_report(data: ReportData) -> bytes:
    """Simple paginated PDF: a title, then one block per event."""
    buffer = io.BytesIO()
    margin = 0.75 * inch
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=margin,
        leftMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=data.title,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Heading1"], fontSize=18, alignment=1)
    body_style = ParagraphStyle("ReportBody", parent=styles["Normal"], fontSize=12, leading=15)

    story = [
        Paragraph(escape(data.title), title_style),
        Paragraph(escape(data.period_label), styles["Normal"]),
        Spacer(1, 12),
    ]

    if not data.events:
        story.append(Paragraph("No events found for this period.", body_style))

    for event in data.events:
        start = format_date_display(date.fromisoformat(event["start_date"]))
        end = format_date_display(date.fromisoformat(event["end_date"]))
        lines = [
            f"Program: {event['program']}",
            f"Start Date: {start} {event['start_time'][:5]}",
            f"End Date: {end} {event['end_time'][:5]}",
            f"Department: {', '.join(event['department'])}",
            f"Participants: {', '.join(event['participants'])}",
            f"Status: {event['status']}",
        ]
        for line in lines:
            story.append(Paragraph(escape(line), body_style))
        story.append(Paragraph("-----------------------------", body_style))
        story.append(Spacer(1, 6))

    doc.build(story)
    return buffer.getvalue()


def render_report(data: ReportData, fmt: str) -> bytes:
    if fmt == "xlsx":
        return create_excel_report(data)
    if fmt == "pdf":
        return create_pdf_report(data)
    raise ValueError(f"Invalid format '{fmt}'.")


def save_report(data: ReportData, fmt: str, output_path: Path) -> Path:
    """Render a report and write it to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_report(data, fmt))
    print(f"Saved {fmt} report to: {output_path}")
    return output_path
