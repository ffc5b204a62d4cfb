"""
Row shapes returned by the database layer.

Using TypedDict so rows stay plain dictionaries for JSON responses and
report writers.
"""

from typing import TypedDict


class UserRecord(TypedDict):
    """Dashboard account (password hash never leaves the data layer)."""
    id: int
    employee_number: str
    email: str
    type: str


class CategoryRecord(TypedDict):
    """Roster entry: a bookable office with its contact and department."""
    id: int
    idnumber: str
    office: str
    email: str
    department: str


class EventRecord(TypedDict):
    """Scheduled event with decoded participant/department arrays."""
    id: int
    program: str
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    purpose: str
    participants: list[str]
    department: list[str]
    status: str
    notified: bool
    created_by: str | None
    created_at: str | None
