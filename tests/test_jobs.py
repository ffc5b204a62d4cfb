"""Housekeeping jobs."""

import asyncio
import threading
from datetime import datetime

import pytest

from core.database import get_event, insert_category, list_events
from services.email import MailError, format_reminder
from services.jobs import (
    JobScheduler,
    delete_expired_events,
    refresh_statuses,
    reset_weekly_events,
    seconds_until_daily,
    seconds_until_weekly,
    send_event_reminders,
)
from services.scheduling import build_event, create_booking


def book(conn, start, end, participants=("Registrar",), program="Meeting"):
    return create_booking(
        conn,
        build_event(
            program=program,
            start_date=start.date(),
            start_time=start.time(),
            end_date=end.date(),
            end_time=end.time(),
            purpose="Jobs",
            participants=list(participants),
            department=["SGOD"],
            now=datetime(2024, 1, 1),
        ),
    )


def test_refresh_statuses(conn):
    ongoing = book(conn, datetime(2024, 1, 10, 9), datetime(2024, 1, 10, 11))
    later = book(conn, datetime(2024, 1, 10, 13), datetime(2024, 1, 10, 14), ["Nurse"])

    changed = refresh_statuses(conn, datetime(2024, 1, 10, 10))

    assert changed == 1
    assert get_event(conn, ongoing)["status"] == "active"
    assert get_event(conn, later)["status"] == "upcoming"
    assert refresh_statuses(conn, datetime(2024, 1, 10, 10)) == 0


def test_delete_expired_events(conn):
    book(conn, datetime(2024, 1, 9, 9), datetime(2024, 1, 9, 10), program="Past")
    book(conn, datetime(2024, 1, 10, 9), datetime(2024, 1, 10, 10), program="Today")

    assert delete_expired_events(conn, datetime(2024, 1, 10, 0, 0)) == 1
    assert [e["program"] for e in list_events(conn)] == ["Today"]


def test_reset_weekly_events(conn):
    book(conn, datetime(2024, 1, 10, 9), datetime(2024, 1, 10, 10))
    book(conn, datetime(2024, 1, 11, 9), datetime(2024, 1, 11, 10))
    assert reset_weekly_events(conn) == 2
    assert list_events(conn) == []


def test_send_event_reminders(conn):
    insert_category(conn, "R-001", "Registrar", "registrar@example.org", "SGOD")
    insert_category(conn, "N-001", "Nurse", "nurse@example.org", "SGOD")
    soon = book(conn, datetime(2024, 1, 10, 9, 30), datetime(2024, 1, 10, 10, 30), program="Soon")
    book(conn, datetime(2024, 1, 10, 15), datetime(2024, 1, 10, 16), program="Later")

    sent = []

    async def fake_send(to, event):
        sent.append((to, event["program"]))

    now = datetime(2024, 1, 10, 9, 0)
    handled = asyncio.run(send_event_reminders(conn, now, send=fake_send))

    assert handled == 1
    assert sorted(sent) == [("nurse@example.org", "Soon"), ("registrar@example.org", "Soon")]
    assert get_event(conn, soon)["notified"] is True

    # Already notified events are not sent again
    assert asyncio.run(send_event_reminders(conn, now, send=fake_send)) == 0


def test_reminder_mail_failure_still_marks_notified(conn):
    insert_category(conn, "R-001", "Registrar", "registrar@example.org", "SGOD")
    event_id = book(conn, datetime(2024, 1, 10, 9, 30), datetime(2024, 1, 10, 10, 30))

    async def failing_send(to, event):
        raise MailError("relay down")

    handled = asyncio.run(send_event_reminders(conn, datetime(2024, 1, 10, 9), send=failing_send))

    assert handled == 1
    assert get_event(conn, event_id)["notified"] is True


def test_format_reminder():
    event = {"program": "Orientation", "start_date": "2024-01-10", "start_time": "09:00:00"}
    assert format_reminder(event) == (
        'Reminder: You have an event "Orientation" starting at 1/10/2024 9:00 AM.'
    )


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2024, 1, 10, 23, 0), 3600),
        (datetime(2024, 1, 10, 0, 0), 86400),
    ],
)
def test_seconds_until_daily(now, expected):
    assert seconds_until_daily(now) == expected


def test_seconds_until_weekly():
    # 2024-01-13 is a Saturday
    assert seconds_until_weekly(datetime(2024, 1, 13, 12, 0)) == 12 * 3600
    # Sunday midnight itself schedules the following Sunday
    assert seconds_until_weekly(datetime(2024, 1, 14, 0, 0)) == 7 * 86400


def test_scheduler_refresh_notifies_on_change(db_path, conn):
    book(conn, datetime(2024, 1, 10, 9), datetime(2024, 1, 10, 11))
    calls = []

    async def on_change():
        calls.append(True)

    scheduler = JobScheduler(db_path, on_change=on_change, clock=lambda: datetime(2024, 1, 10, 10))

    assert asyncio.run(scheduler.run_status_refresh()) == 1
    assert asyncio.run(scheduler.run_status_refresh()) == 0
    assert calls == [True]


def test_scheduler_start_and_stop(db_path):
    async def run():
        scheduler = JobScheduler(db_path, clock=lambda: datetime(2024, 1, 10, 10))
        scheduler.start()
        assert len(scheduler._tasks) == 4
        await asyncio.sleep(0)
        await scheduler.stop()
        assert scheduler._tasks == []

    asyncio.run(run())


def test_reminder_queries_run_off_the_event_loop(conn, monkeypatch):
    import services.jobs as jobs

    insert_category(conn, "R-001", "Registrar", "registrar@example.org", "SGOD")
    book(conn, datetime(2024, 1, 10, 9, 30), datetime(2024, 1, 10, 10, 30))
    query_threads = []

    def tracking(func):
        def wrapper(*args):
            query_threads.append(threading.get_ident())
            return func(*args)
        return wrapper

    for name in ("list_unnotified_events_starting_between", "list_category_emails", "mark_event_notified"):
        monkeypatch.setattr(jobs, name, tracking(getattr(jobs, name)))

    async def fake_send(to, event):
        pass

    async def run():
        loop_thread = threading.get_ident()
        await send_event_reminders(conn, datetime(2024, 1, 10, 9), send=fake_send)
        return loop_thread

    loop_thread = asyncio.run(run())

    assert len(query_threads) == 3
    assert loop_thread not in query_threads
