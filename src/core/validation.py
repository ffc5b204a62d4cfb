"""
Event validation and booking-conflict detection.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from core.timeutils import combine


@dataclass
class Conflict:
    """An existing event that blocks a candidate booking."""

    event_id: int
    program: str
    start: datetime
    end: datetime
    participants: list[str] = field(default_factory=list)  # offending, as stored

    def describe(self) -> str:
        who = ", ".join(self.participants)
        return (
            f"{who}: '{self.program}' "
            f"{self.start:%Y-%m-%d %H:%M} - {self.end:%Y-%m-%d %H:%M}"
        )

    def as_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "program": self.program,
            "start": self.start.isoformat(sep=" "),
            "end": self.end.isoformat(sep=" "),
            "participants": self.participants,
        }


class BookingConflictError(Exception):
    """Raised when a booking overlaps an existing event for the same participant."""

    def __init__(self, conflicts: list[Conflict]):
        self.conflicts = conflicts
        super().__init__(
            "A selected office is already booked during the selected date & time range."
        )


def normalize_participant(participant: str) -> str:
    """Participants compare case-insensitively after trimming."""
    return participant.strip().lower()


def normalize_participants(participants) -> set[str]:
    """
    Normalize a participant list.

    Accepts a list, a JSON array string, or a single bare name.
    """
    if isinstance(participants, (list, tuple, set)):
        values = participants
    elif isinstance(participants, str):
        try:
            decoded = json.loads(participants)
        except ValueError:
            decoded = participants
        values = decoded if isinstance(decoded, list) else [participants]
    else:
        return set()
    return {normalize_participant(str(p)) for p in values if str(p).strip()}


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap: touching at a boundary is not an overlap."""
    return a_start < b_end and b_start < a_end


def find_conflicts(
    start: datetime,
    end: datetime,
    participants,
    existing: list[dict],
    exclude_id: int | None = None,
) -> list[Conflict]:
    """
    Find existing events that block the candidate booking.

    An event conflicts when its [start, end) range overlaps the candidate's and
    at least one normalized participant is shared. The event with exclude_id
    (the row being edited) is skipped.
    """
    wanted = normalize_participants(participants)
    conflicts = []

    for event in existing:
        if exclude_id is not None and event["id"] == exclude_id:
            continue

        event_start = combine(event["start_date"], event["start_time"])
        event_end = combine(event["end_date"], event["end_time"])
        if not intervals_overlap(start, end, event_start, event_end):
            continue

        shared = [
            p for p in event["participants"] if normalize_participant(p) in wanted
        ]
        if shared:
            conflicts.append(
                Conflict(
                    event_id=event["id"],
                    program=event["program"],
                    start=event_start,
                    end=event_end,
                    participants=shared,
                )
            )

    return conflicts


def resolve_end(start: datetime, end: datetime, crosses_midnight: bool | None = None) -> datetime:
    """
    Return the effective end of an event.

    When end is not after start the end is moved forward one day, so a
    22:00-02:00 booking spans midnight. This masks genuine end-before-start
    input, so callers can pass crosses_midnight=False to reject instead.
    """
    if end > start:
        return end

    if crosses_midnight is False:
        raise ValueError("End date/time must be after start date/time")

    rolled = end + timedelta(days=1)
    if rolled <= start:
        raise ValueError("End date/time must be after start date/time")
    return rolled


def clean_names(values: list[str]) -> list[str]:
    """Trim names and drop blanks and case-insensitive duplicates, keeping order."""
    seen = set()
    cleaned = []
    for value in values:
        value = value.strip()
        key = value.lower()
        if value and key not in seen:
            seen.add(key)
            cleaned.append(value)
    return cleaned
