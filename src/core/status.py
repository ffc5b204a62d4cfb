"""
Event lifecycle status derived from the wall clock.
"""

from datetime import datetime

UPCOMING = "upcoming"
ACTIVE = "active"
ENDED = "ended"


def derive_status(now: datetime, start: datetime, end: datetime) -> str:
    """
    Status of an event occupying [start, end) at time now.

    Pure function of its arguments; recomputing always gives the same answer.
    """
    if now < start:
        return UPCOMING
    if now < end:
        return ACTIVE
    return ENDED
