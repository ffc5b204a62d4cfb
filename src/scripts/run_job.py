#!/usr/bin/env python3
"""
Run one housekeeping job once (for cron when the in-process scheduler is off).

Usage:
    python src/scripts/run_job.py refresh-statuses
    python src/scripts/run_job.py delete-expired
    python src/scripts/run_job.py send-reminders
    python src/scripts/run_job.py weekly-reset
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection
from core.timeutils import local_now
from services.jobs import (
    delete_expired_events,
    refresh_statuses,
    reset_weekly_events,
    send_event_reminders,
)

SYNC_JOBS = {
    "refresh-statuses": refresh_statuses,
    "delete-expired": delete_expired_events,
    "weekly-reset": reset_weekly_events,
}
JOB_NAMES = sorted([*SYNC_JOBS, "send-reminders"])


async def main(job_name: str) -> int:
    conn = get_connection(DB_PATH)
    try:
        now = local_now()
        if job_name == "send-reminders":
            count = await send_event_reminders(conn, now)
        else:
            count = SYNC_JOBS[job_name](conn, now)
    finally:
        conn.close()
    print(f"{job_name}: {count} event(s) affected")
    return count


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a scheduler housekeeping job")
    parser.add_argument("job", choices=JOB_NAMES)
    args = parser.parse_args()

    asyncio.run(main(args.job))
