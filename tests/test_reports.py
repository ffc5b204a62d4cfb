"""Report generation and download."""

import io
from datetime import date, datetime, time

import pytest
from openpyxl import load_workbook

from core.database import insert_category
from services.reports import (
    collect_report_data,
    create_excel_report,
    create_pdf_report,
    parse_monthly_period,
    parse_weekly_period,
    report_filename,
)
from services.scheduling import build_event, create_booking


def book(conn, program, day, participants, department):
    create_booking(
        conn,
        build_event(
            program=program,
            start_date=day,
            start_time=time(9, 0),
            end_date=day,
            end_time=time(10, 0),
            purpose="Report test",
            participants=participants,
            department=department,
            now=datetime(2024, 1, 1),
        ),
    )


@pytest.fixture
def populated(conn, admin, sgod_user):
    insert_category(conn, "R-001", "Registrar", "registrar@example.org", "SGOD")
    insert_category(conn, "L-001", "Library", "library@example.org", "CID")
    book(conn, "Orientation", date(2024, 1, 10), ["Registrar"], ["SGOD"])
    book(conn, "Reading Fair", date(2024, 1, 12), ["Library"], ["CID"])
    book(conn, "Audit", date(2024, 2, 5), ["Registrar"], ["SGOD", "CID"])
    return conn


def test_parse_periods():
    assert parse_weekly_period("2024-01-08", "2024-01-14") == (date(2024, 1, 8), date(2024, 1, 14))
    assert parse_monthly_period("2", "2024") == (2, 2024)


@pytest.mark.parametrize("start, end", [(None, "2024-01-14"), ("01/08/2024", "2024-01-14"), ("2024-01-14", "2024-01-08")])
def test_parse_weekly_period_rejects(start, end):
    with pytest.raises(ValueError):
        parse_weekly_period(start, end)


@pytest.mark.parametrize("start, end", [("13", "2024"), ("x", "2024"), ("1", None)])
def test_parse_monthly_period_rejects(start, end):
    with pytest.raises(ValueError):
        parse_monthly_period(start, end)


def test_weekly_report_data_filters_by_department(populated):
    data = collect_report_data(populated, "weekly", "SGOD", "2024-01-08", "2024-01-14")

    assert [e["program"] for e in data.events] == ["Orientation"]
    assert [c["office"] for c in data.categories] == ["Registrar"]
    assert [u["type"] for u in data.users] == ["SGOD"]
    assert data.title == "Events Report (WEEKLY) - Department: SGOD"


def test_monthly_report_data_all_departments(populated):
    data = collect_report_data(populated, "monthly", "All", "2", "2024")
    assert [e["program"] for e in data.events] == ["Audit"]
    assert len(data.categories) == 2
    assert data.period_label == "February 2024"


def test_excel_report_has_three_sheets(populated):
    data = collect_report_data(populated, "weekly", "All", "2024-01-08", "2024-01-14")
    wb = load_workbook(io.BytesIO(create_excel_report(data)))

    assert wb.sheetnames == ["Categories", "Users", "Events"]
    events = wb["Events"]
    assert events.cell(row=1, column=2).value == "Program"
    assert events.cell(row=1, column=1).font.bold
    assert events.cell(row=2, column=2).value == "Orientation"
    assert events.cell(row=2, column=8).value == "Registrar"
    assert events.max_row == 3


def test_pdf_report_renders(populated):
    data = collect_report_data(populated, "weekly", "CID", "2024-01-08", "2024-01-14")
    assert create_pdf_report(data).startswith(b"%PDF")


def test_report_filename():
    name = report_filename("weekly", "SGOD", "pdf", now=datetime(2024, 1, 14, 8, 30, 5))
    assert name == "report_weekly_SGOD_20240114083005.pdf"


def test_download_xlsx(client, populated, admin_headers):
    response = client.get(
        "/api/reports/weekly",
        params={"start": "2024-01-08", "end": "2024-01-14"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert 'filename="report_weekly_All_' in response.headers["content-disposition"]
    assert load_workbook(io.BytesIO(response.content)).sheetnames == ["Categories", "Users", "Events"]


def test_download_pdf(client, populated, admin_headers):
    response = client.get(
        "/api/reports/monthly",
        params={"start": "1", "end": "2024", "format": "pdf"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


def test_department_user_all_means_own_department(client, populated, sgod_headers):
    response = client.get(
        "/api/reports/weekly",
        params={"start": "2024-01-08", "end": "2024-01-14"},
        headers=sgod_headers,
    )
    assert response.status_code == 200
    assert "report_weekly_SGOD_" in response.headers["content-disposition"]


def test_department_user_foreign_department_is_403(client, populated, sgod_headers):
    response = client.get(
        "/api/reports/weekly",
        params={"department": "CID", "start": "2024-01-08", "end": "2024-01-14"},
        headers=sgod_headers,
    )
    assert response.status_code == 403


@pytest.mark.parametrize(
    "path, params",
    [
        ("/api/reports/daily", {"start": "2024-01-08", "end": "2024-01-14"}),
        ("/api/reports/weekly", {"start": "2024-01-08", "end": "2024-01-14", "format": "csv"}),
        ("/api/reports/weekly", {"start": "2024-01-08"}),
        ("/api/reports/monthly", {"start": "13", "end": "2024"}),
    ],
)
def test_bad_report_requests_are_400(client, admin_headers, path, params):
    response = client.get(path, params=params, headers=admin_headers)
    assert response.status_code == 400


def test_office_user_cannot_download(client, office_headers):
    response = client.get("/api/reports/monthly", params={"start": "1", "end": "2024"}, headers=office_headers)
    assert response.status_code == 403


def test_report_filename_strips_header_unsafe_characters():
    name = report_filename("weekly", 'Ops "Dept"/Ñ', "xlsx", now=datetime(2024, 1, 14, 8, 30, 5))
    assert name == "report_weekly_Ops_Dept_20240114083005.xlsx"


def test_download_with_unusual_department_name(client, conn, admin_headers):
    response = client.get(
        "/api/reports/weekly",
        params={"department": 'Région "Nord"', "start": "2024-01-08", "end": "2024-01-14"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert 'filename="report_weekly_R_gion_Nord_' in response.headers["content-disposition"]
