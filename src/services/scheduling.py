"""
Event booking: range resolution, conflict check and write in one transaction.
"""

import sqlite3
from datetime import date, datetime, time

from core.database import find_overlapping_events, insert_event, update_event, write_transaction
from core.status import derive_status
from core.timeutils import to_sql
from core.validation import BookingConflictError, clean_names, find_conflicts, resolve_end


def build_event(
    program: str,
    start_date: date,
    start_time: time,
    end_date: date,
    end_time: time,
    purpose: str,
    participants: list[str],
    department: list[str],
    now: datetime,
    crosses_midnight: bool | None = None,
    created_by: str | None = None,
) -> dict:
    """
    Assemble a storable event.

    Raises:
        ValueError: if the range is invalid or no participant/department remains
    """
    start = datetime.combine(start_date, start_time.replace(microsecond=0))
    end = resolve_end(
        start, datetime.combine(end_date, end_time.replace(microsecond=0)), crosses_midnight
    )

    participants = clean_names(participants)
    department = clean_names(department)
    if not participants or not department:
        raise ValueError("Please select at least one department and one participant.")

    return {
        "program": program,
        "start_date": start.date().isoformat(),
        "start_time": start.strftime("%H:%M:%S"),
        "end_date": end.date().isoformat(),
        "end_time": end.strftime("%H:%M:%S"),
        "purpose": purpose,
        "participants": participants,
        "department": department,
        "status": derive_status(now, start, end),
        "created_by": created_by,
        # kept for the conflict check, not stored
        "_start": start,
        "_end": end,
    }


def _check_conflicts(conn: sqlite3.Connection, event: dict, exclude_id: int | None):
    candidates = find_overlapping_events(
        conn, to_sql(event["_start"]), to_sql(event["_end"]), exclude_id
    )
    conflicts = find_conflicts(
        event["_start"], event["_end"], event["participants"], candidates, exclude_id
    )
    if conflicts:
        raise BookingConflictError(conflicts)


def create_booking(conn: sqlite3.Connection, event: dict) -> int:
    """
    Insert an event unless it conflicts.

    Raises:
        BookingConflictError: if any participant is already booked in the range
    """
    with write_transaction(conn):
        _check_conflicts(conn, event, None)
        return insert_event(conn, event)


def update_booking(conn: sqlite3.Connection, event_id: int, event: dict) -> bool:
    """Replace an event unless the new range/participants conflict with another event."""
    with write_transaction(conn):
        _check_conflicts(conn, event, event_id)
        return update_event(conn, event_id, event)
