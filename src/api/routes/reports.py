"""Report download endpoint."""

import asyncio
import sqlite3

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from api.dependencies import CurrentUser, api_error, get_db, require_dashboard_user
from api.models import ErrorCodes
from core.config import PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE
from services.reports import (
    ALL_DEPARTMENTS,
    REPORT_FORMATS,
    REPORT_TYPES,
    collect_report_data,
    render_report,
    report_filename,
)

router = APIRouter(prefix="/api")


def resolve_report_department(user: CurrentUser, department: str | None) -> str:
    """
    "All" covers every department for administrators and the caller's own
    department for everyone else.
    """
    department = (department or ALL_DEPARTMENTS).strip()
    if department == ALL_DEPARTMENTS:
        return ALL_DEPARTMENTS if user.is_admin else user.own_department
    if not user.can_act_for(department):
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "You can only generate reports for your own department.",
            ErrorCodes.FORBIDDEN,
        )
    return department


def _process_in_thread(
    conn: sqlite3.Connection,
    report_type: str,
    department: str,
    start: str | None,
    end: str | None,
    fmt: str,
) -> bytes:
    data = collect_report_data(conn, report_type, department, start, end)
    return render_report(data, fmt)


@router.get("/reports/{report_type}")
async def download_report(
    report_type: str,
    department: str | None = Query(default=ALL_DEPARTMENTS),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    format: str = Query(default="xlsx"),
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(require_dashboard_user),
):
    """
    Download a weekly or monthly report.

    Weekly: start/end are YYYY-MM-DD. Monthly: start is the month (1-12) and
    end is the year.
    """
    if report_type not in REPORT_TYPES:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid report type",
            ErrorCodes.INVALID_REQUEST,
            [f"Expected one of: {', '.join(REPORT_TYPES)}"],
        )
    if format not in REPORT_FORMATS:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid format",
            ErrorCodes.INVALID_REQUEST,
            [f"Expected one of: {', '.join(REPORT_FORMATS)}"],
        )

    scoped_department = resolve_report_department(user, department)

    try:
        content = await asyncio.to_thread(
            _process_in_thread, conn, report_type, scoped_department, start, end, format
        )
    except ValueError as e:
        raise api_error(status.HTTP_400_BAD_REQUEST, str(e), ErrorCodes.VALIDATION_ERROR)

    filename = report_filename(report_type, scoped_department, format)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE if format == "xlsx" else PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
