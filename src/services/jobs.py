"""
Housekeeping jobs: status refresh, expiry cleanup, reminders, weekly reset.

Each job takes an open connection and the current wall-clock time so it can
run from the in-process scheduler, from scripts/run_job.py under cron, or
from tests.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from pathlib import Path

from core.config import (
    REMINDER_CHECK_SECONDS,
    REMINDER_WINDOW_MINUTES,
    STATUS_REFRESH_SECONDS,
)
from core.database import (
    delete_all_events,
    delete_events_ending_before,
    get_connection,
    list_category_emails,
    list_events,
    list_unnotified_events_starting_between,
    mark_event_notified,
    set_event_status,
    write_transaction,
)
from core.status import derive_status
from core.timeutils import combine, local_now, to_sql
from services.email import MailError, send_reminder_email
from services.notifications import notify_status_updated

logger = logging.getLogger(__name__)

SUNDAY = 6


# =============================================================================
# JOBS
# =============================================================================


def refresh_statuses(conn: sqlite3.Connection, now: datetime) -> int:
    """Recompute every event's status; returns how many rows changed."""
    changed = 0
    with write_transaction(conn):
        for event in list_events(conn):
            status = derive_status(
                now,
                combine(event["start_date"], event["start_time"]),
                combine(event["end_date"], event["end_time"]),
            )
            if status != event["status"]:
                set_event_status(conn, event["id"], status)
                changed += 1
    return changed


def delete_expired_events(conn: sqlite3.Connection, now: datetime) -> int:
    """Delete events that ended before now."""
    deleted = delete_events_ending_before(conn, to_sql(now))
    if deleted:
        logger.info("Deleted %d expired event(s)", deleted)
    return deleted


def reset_weekly_events(conn: sqlite3.Connection, now: datetime | None = None) -> int:
    """Delete all events to start the new week empty."""
    deleted = delete_all_events(conn)
    logger.info("Weekly reset removed %d event(s)", deleted)
    return deleted


async def send_event_reminders(
    conn: sqlite3.Connection,
    now: datetime,
    send: Callable[[str, dict], Awaitable[None]] = send_reminder_email,
) -> int:
    """
    E-mail a reminder for each event starting within the reminder window.

    Every roster address receives the reminder. Events without participants
    are skipped and stay unnotified. Returns the number of events handled.
    """
    window_end = now + timedelta(minutes=REMINDER_WINDOW_MINUTES)
    # Queries run in worker threads to keep the event loop free
    events = await asyncio.to_thread(
        list_unnotified_events_starting_between, conn, to_sql(now), to_sql(window_end)
    )
    if not events:
        return 0

    recipients = await asyncio.to_thread(list_category_emails, conn)
    handled = 0

    for event in events:
        if not event["participants"]:
            continue

        for email in recipients:
            try:
                await send(email, event)
                logger.info("Sent reminder to %s for event %s", email, event["id"])
            except MailError as e:
                logger.error("Failed to send reminder to %s: %s", email, e)

        await asyncio.to_thread(mark_event_notified, conn, event["id"])
        handled += 1

    return handled


# =============================================================================
# SCHEDULING
# =============================================================================


def seconds_until_daily(now: datetime, hour: int = 0, minute: int = 0) -> float:
    """Seconds from now until the next hour:minute (strictly in the future)."""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


def seconds_until_weekly(now: datetime, weekday: int = SUNDAY, hour: int = 0, minute: int = 0) -> float:
    """Seconds until the next weekday (Monday=0) at hour:minute."""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    target += timedelta(days=(weekday - now.weekday()) % 7)
    if target <= now:
        target += timedelta(days=7)
    return (target - now).total_seconds()


class JobScheduler:
    """
    Runs the housekeeping jobs as asyncio tasks inside the API process.

    Jobs are independent; a job that overruns simply delays its own next run.
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        on_change: Callable[[], Awaitable[None]] = notify_status_updated,
        clock: Callable[[], datetime] = local_now,
    ):
        self.db_path = db_path
        self.on_change = on_change
        self.clock = clock
        self._tasks: list[asyncio.Task] = []

    # ---- job bodies -------------------------------------------------------

    def _run_sync(self, job: Callable[[sqlite3.Connection, datetime], int]) -> int:
        conn = get_connection(self.db_path)
        try:
            return job(conn, self.clock())
        finally:
            conn.close()

    async def run_status_refresh(self) -> int:
        changed = await asyncio.to_thread(self._run_sync, refresh_statuses)
        if changed:
            await self.on_change()
        return changed

    async def run_expiry_cleanup(self) -> int:
        deleted = await asyncio.to_thread(self._run_sync, delete_expired_events)
        if deleted:
            await self.on_change()
        return deleted

    async def run_weekly_reset(self) -> int:
        deleted = await asyncio.to_thread(self._run_sync, reset_weekly_events)
        await self.on_change()
        return deleted

    async def run_reminders(self) -> int:
        conn = await asyncio.to_thread(get_connection, self.db_path)
        try:
            return await send_event_reminders(conn, self.clock())
        finally:
            await asyncio.to_thread(conn.close)

    # ---- loops ------------------------------------------------------------

    async def _guarded(self, name: str, job: Callable[[], Awaitable[int]]) -> None:
        try:
            await job()
        except Exception:
            logger.exception("Job %s failed", name)

    async def _every(self, name: str, seconds: int, job: Callable[[], Awaitable[int]]) -> None:
        while True:
            await self._guarded(name, job)
            await asyncio.sleep(seconds)

    async def _at(
        self,
        name: str,
        delay: Callable[[datetime], float],
        job: Callable[[], Awaitable[int]],
    ) -> None:
        while True:
            await asyncio.sleep(delay(self.clock()))
            await self._guarded(name, job)

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(
                self._every("status_refresh", STATUS_REFRESH_SECONDS, self.run_status_refresh)
            ),
            asyncio.create_task(
                self._every("reminders", REMINDER_CHECK_SECONDS, self.run_reminders)
            ),
            asyncio.create_task(
                self._at("expiry_cleanup", seconds_until_daily, self.run_expiry_cleanup)
            ),
            asyncio.create_task(
                self._at("weekly_reset", seconds_until_weekly, self.run_weekly_reset)
            ),
        ]
        logger.info("Started %d background job(s)", len(self._tasks))

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
