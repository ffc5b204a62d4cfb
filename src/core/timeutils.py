"""
Wall-clock helpers.

Event dates and times are stored as naive local values in TIMEZONE, so every
comparison uses naive datetimes produced here.
"""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from core.config import TIMEZONE

SQL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_now() -> datetime:
    """Current wall-clock time in the configured timezone, without tzinfo."""
    return datetime.now(ZoneInfo(TIMEZONE)).replace(tzinfo=None, microsecond=0)


def combine(day: str | date, clock: str | time) -> datetime:
    """Combine stored date and time values into a datetime."""
    if isinstance(day, str):
        day = date.fromisoformat(day)
    if isinstance(clock, str):
        clock = time.fromisoformat(clock)
    return datetime.combine(day, clock)


def to_sql(dt: datetime) -> str:
    """Format as 'YYYY-MM-DD HH:MM:SS', the form stored columns concatenate to."""
    return dt.strftime(SQL_DATETIME_FORMAT)


def format_time_12h(clock: str | time) -> str:
    """Format a time as '9:05 AM' (platform-safe, no zero-padding)."""
    if isinstance(clock, str):
        clock = time.fromisoformat(clock)
    hour = clock.hour % 12 or 12
    suffix = "PM" if clock.hour >= 12 else "AM"
    return f"{hour}:{clock.minute:02d} {suffix}"


def format_date_display(d: date) -> str:
    """Format date as M/D/YYYY (platform-safe, no zero-padding)."""
    return f"{d.month}/{d.day}/{d.year}"


def format_datetime_display(dt: datetime) -> str:
    """Format as 'M/D/YYYY H:MM AM' for e-mails and PDFs."""
    return f"{format_date_display(dt.date())} {format_time_12h(dt.time())}"
