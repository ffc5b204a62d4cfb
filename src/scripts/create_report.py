#!/usr/bin/env python3
"""
Create a weekly or monthly events report from the scheduler database.

Writes an Excel workbook (Categories, Users, Events) or a PDF summary to
output/reports/<type>/ and optionally e-mails it.

Usage:
    python src/scripts/create_report.py weekly --start 2025-11-03 --end 2025-11-09
    python src/scripts/create_report.py monthly --month 2025-11 --format pdf --email boss@example.org
"""

import argparse
import asyncio
import sys
import traceback
from datetime import date, timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, OUTPUT_DIR
from core.database import get_connection
from services.email import send_report_email
from services.reports import ALL_DEPARTMENTS, collect_report_data, report_filename, save_report


# =============================================================================
# DATE UTILITIES
# =============================================================================


def get_weekly_date_range(start: str | None, end: str | None) -> tuple[str, str]:
    """
    Date range for a weekly report.

    Defaults to the previous Monday-Sunday week.
    """
    if start and end:
        return start, end
    today = date.today()
    last_monday = today - timedelta(days=today.weekday() + 7)
    return last_monday.isoformat(), (last_monday + timedelta(days=6)).isoformat()


def get_month(month_str: str | None) -> tuple[str, str]:
    """Month and year strings from YYYY-MM (defaults to previous month)."""
    if month_str:
        year, month = map(int, month_str.split("-"))
    else:
        first_of_this_month = date.today().replace(day=1)
        previous = first_of_this_month - timedelta(days=1)
        year, month = previous.year, previous.month
    return str(month), str(year)


# =============================================================================
# MAIN
# =============================================================================


async def main(args):
    """Main entry point."""
    try:
        if args.report_type == "monthly":
            start, end = get_month(args.month)
        else:
            start, end = get_weekly_date_range(args.start, args.end)
        print(f"Generating {args.report_type} report ({start} to {end}), department {args.department}")

        conn = get_connection(DB_PATH)
        try:
            data = collect_report_data(conn, args.report_type, args.department, start, end)
        finally:
            conn.close()
        print(f"Events in report: {len(data.events)}")

        output_dir = OUTPUT_DIR / "reports" / args.report_type
        output_path = output_dir / report_filename(args.report_type, args.department, args.format)
        save_report(data, args.format, output_path)

        if args.email:
            await send_report_email(args.email, output_path, data.title)
            print(f"Sent report email to {args.email}")

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate an events report")
    parser.add_argument("report_type", choices=["weekly", "monthly"])
    parser.add_argument("--start", help="Weekly start date (YYYY-MM-DD)")
    parser.add_argument("--end", help="Weekly end date (YYYY-MM-DD)")
    parser.add_argument("--month", help="Monthly report month (YYYY-MM). Defaults to previous month.")
    parser.add_argument("--department", default=ALL_DEPARTMENTS)
    parser.add_argument("--format", choices=["xlsx", "pdf"], default="xlsx")
    parser.add_argument("--email", help="Send the report to this address")
    args = parser.parse_args()

    asyncio.run(main(args))
