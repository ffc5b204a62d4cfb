"""
SQLite database operations for users, roster categories and events.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from core.config import DB_PATH
from models.records import CategoryRecord, EventRecord, UserRecord

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        employee_number TEXT UNIQUE NOT NULL,
        email TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        type TEXT NOT NULL,
        otp_code TEXT,
        otp_expires TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        idnumber TEXT UNIQUE NOT NULL,
        office TEXT NOT NULL,
        email TEXT NOT NULL,
        department TEXT NOT NULL,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # participants/department hold JSON arrays of strings (no foreign keys)
    """
    CREATE TABLE IF NOT EXISTS schedule_events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        program TEXT NOT NULL,
        start_date TEXT NOT NULL,
        start_time TEXT NOT NULL,
        end_date TEXT NOT NULL,
        end_time TEXT NOT NULL,
        purpose TEXT NOT NULL,
        participants TEXT NOT NULL DEFAULT '[]',
        department TEXT NOT NULL DEFAULT '[]',
        status TEXT NOT NULL DEFAULT 'upcoming'
            CHECK(status IN ('upcoming', 'active', 'ended')),
        notified INTEGER NOT NULL DEFAULT 0,
        created_by TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        user_email TEXT,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_start ON schedule_events(start_date, start_time)",
    "CREATE INDEX IF NOT EXISTS idx_events_end ON schedule_events(end_date, end_time)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
]

EVENT_START_SQL = "(start_date || ' ' || start_time)"
EVENT_END_SQL = "(end_date || ' ' || end_time)"


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Get a database connection.

    Runs in autocommit mode; multi-statement writes go through
    write_transaction().
    """
    conn = sqlite3.connect(
        db_path or DB_PATH,
        isolation_level=None,
        check_same_thread=False,
        timeout=30,
    )
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they don't exist."""
    for statement in SCHEMA:
        conn.execute(statement)


@contextmanager
def write_transaction(conn: sqlite3.Connection):
    """
    Run a block inside BEGIN IMMEDIATE.

    The write lock is taken before the first read, so a check-then-write
    sequence cannot interleave with another writer.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


# =============================================================================
# JSON ARRAY COLUMNS
# =============================================================================


def encode_list(values: list[str]) -> str:
    return json.dumps(list(values))


def decode_list(raw) -> list[str]:
    """Decode a JSON array column; a bare string becomes a one-item list."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [str(v) for v in raw]
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return [str(raw)]
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


# =============================================================================
# USERS
# =============================================================================

USER_COLUMNS = "id, employee_number, email, type"


def _user(row: sqlite3.Row) -> UserRecord:
    return {
        "id": row["id"],
        "employee_number": row["employee_number"],
        "email": row["email"],
        "type": row["type"],
    }


def list_users(conn: sqlite3.Connection, user_type: str | None = None) -> list[UserRecord]:
    if user_type:
        rows = conn.execute(
            f"SELECT {USER_COLUMNS} FROM users WHERE type = ? ORDER BY id", (user_type,)
        ).fetchall()
    else:
        rows = conn.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY id").fetchall()
    return [_user(row) for row in rows]


def get_user(conn: sqlite3.Connection, user_id: int) -> UserRecord | None:
    row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
    return _user(row) if row else None


def get_user_credentials(conn: sqlite3.Connection, employee_number: str) -> sqlite3.Row | None:
    """Full user row including password_hash, for login."""
    return conn.execute(
        "SELECT * FROM users WHERE employee_number = ?", (employee_number,)
    ).fetchone()


def get_user_by_email(conn: sqlite3.Connection, email: str) -> sqlite3.Row | None:
    return conn.execute(
        "SELECT * FROM users WHERE lower(email) = lower(?) ORDER BY id LIMIT 1", (email,)
    ).fetchone()


def user_type_taken(conn: sqlite3.Connection, user_type: str, exclude_id: int | None = None) -> bool:
    row = conn.execute(
        "SELECT id FROM users WHERE type = ? AND id != ?", (user_type, exclude_id or -1)
    ).fetchone()
    return row is not None


def employee_number_taken(
    conn: sqlite3.Connection, employee_number: str, exclude_id: int | None = None
) -> bool:
    row = conn.execute(
        "SELECT id FROM users WHERE employee_number = ? AND id != ?",
        (employee_number, exclude_id or -1),
    ).fetchone()
    return row is not None


def insert_user(
    conn: sqlite3.Connection,
    employee_number: str,
    email: str,
    password_hash: str,
    user_type: str,
) -> int:
    cursor = conn.execute(
        "INSERT INTO users (employee_number, email, password_hash, type) VALUES (?, ?, ?, ?)",
        (employee_number, email, password_hash, user_type),
    )
    return cursor.lastrowid


def update_user(
    conn: sqlite3.Connection,
    user_id: int,
    employee_number: str,
    email: str,
    user_type: str,
    password_hash: str | None = None,
) -> bool:
    """Update a user; the password is only changed when a new hash is given."""
    if password_hash:
        cursor = conn.execute(
            "UPDATE users SET employee_number = ?, email = ?, password_hash = ?, type = ? WHERE id = ?",
            (employee_number, email, password_hash, user_type, user_id),
        )
    else:
        cursor = conn.execute(
            "UPDATE users SET employee_number = ?, email = ?, type = ? WHERE id = ?",
            (employee_number, email, user_type, user_id),
        )
    return cursor.rowcount > 0


def delete_user(conn: sqlite3.Connection, user_id: int) -> bool:
    cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
    return cursor.rowcount > 0


def set_user_otp(conn: sqlite3.Connection, user_id: int, otp_code: str, expires: str) -> None:
    conn.execute(
        "UPDATE users SET otp_code = ?, otp_expires = ? WHERE id = ?",
        (otp_code, expires, user_id),
    )


def reset_user_password(conn: sqlite3.Connection, user_id: int, password_hash: str) -> None:
    """Store a new password hash and clear any pending OTP."""
    conn.execute(
        "UPDATE users SET password_hash = ?, otp_code = NULL, otp_expires = NULL WHERE id = ?",
        (password_hash, user_id),
    )


# =============================================================================
# CATEGORIES (ROSTER)
# =============================================================================

CATEGORY_COLUMNS = "id, idnumber, office, email, department"


def _category(row: sqlite3.Row) -> CategoryRecord:
    return {
        "id": row["id"],
        "idnumber": row["idnumber"],
        "office": row["office"],
        "email": row["email"],
        "department": row["department"],
    }


def list_categories(
    conn: sqlite3.Connection, department: str | None = None
) -> list[CategoryRecord]:
    if department:
        rows = conn.execute(
            f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE lower(department) = lower(?) ORDER BY id",
            (department,),
        ).fetchall()
    else:
        rows = conn.execute(f"SELECT {CATEGORY_COLUMNS} FROM categories ORDER BY id").fetchall()
    return [_category(row) for row in rows]


def list_category_departments(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT DISTINCT department FROM categories WHERE department != '' ORDER BY department"
    ).fetchall()
    return [row["department"] for row in rows]


def list_category_emails(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT DISTINCT email FROM categories WHERE email != '' ORDER BY email"
    ).fetchall()
    return [row["email"] for row in rows]


def get_category(conn: sqlite3.Connection, category_id: int) -> CategoryRecord | None:
    row = conn.execute(
        f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = ?", (category_id,)
    ).fetchone()
    return _category(row) if row else None


def get_category_by_idnumber(conn: sqlite3.Connection, idnumber: str) -> CategoryRecord | None:
    row = conn.execute(
        f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE idnumber = ? LIMIT 1", (idnumber,)
    ).fetchone()
    return _category(row) if row else None


def insert_category(
    conn: sqlite3.Connection, idnumber: str, office: str, email: str, department: str
) -> int:
    """Insert a roster entry; raises sqlite3.IntegrityError on duplicate ID number."""
    cursor = conn.execute(
        "INSERT INTO categories (idnumber, office, email, department) VALUES (?, ?, ?, ?)",
        (idnumber, office, email, department),
    )
    return cursor.lastrowid


def update_category(
    conn: sqlite3.Connection, category_id: int, office: str, email: str, department: str
) -> bool:
    cursor = conn.execute(
        "UPDATE categories SET office = ?, email = ?, department = ? WHERE id = ?",
        (office, email, department, category_id),
    )
    return cursor.rowcount > 0


def delete_category(conn: sqlite3.Connection, category_id: int) -> bool:
    """Delete a roster entry. Events keep their own copy of the office name."""
    cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
    return cursor.rowcount > 0


# =============================================================================
# EVENTS
# =============================================================================


def _event(row: sqlite3.Row) -> EventRecord:
    return {
        "id": row["id"],
        "program": row["program"],
        "start_date": row["start_date"],
        "start_time": row["start_time"],
        "end_date": row["end_date"],
        "end_time": row["end_time"],
        "purpose": row["purpose"],
        "participants": decode_list(row["participants"]),
        "department": decode_list(row["department"]),
        "status": row["status"],
        "notified": bool(row["notified"]),
        "created_by": row["created_by"],
        "created_at": row["created_at"],
    }


def list_events(conn: sqlite3.Connection) -> list[EventRecord]:
    rows = conn.execute(
        "SELECT * FROM schedule_events ORDER BY start_date, start_time, id"
    ).fetchall()
    return [_event(row) for row in rows]


def get_event(conn: sqlite3.Connection, event_id: int) -> EventRecord | None:
    row = conn.execute("SELECT * FROM schedule_events WHERE id = ?", (event_id,)).fetchone()
    return _event(row) if row else None


def find_overlapping_events(
    conn: sqlite3.Connection, start: str, end: str, exclude_id: int | None = None
) -> list[EventRecord]:
    """
    Events whose [start, end) overlaps the given half-open range.

    start/end are 'YYYY-MM-DD HH:MM:SS' strings.
    """
    rows = conn.execute(
        f"""
        SELECT * FROM schedule_events
        WHERE {EVENT_START_SQL} < ? AND ? < {EVENT_END_SQL} AND id != ?
        ORDER BY start_date, start_time, id
        """,
        (end, start, exclude_id or -1),
    ).fetchall()
    return [_event(row) for row in rows]


def insert_event(conn: sqlite3.Connection, event: dict) -> int:
    cursor = conn.execute(
        """
        INSERT INTO schedule_events (
            program, start_date, start_time, end_date, end_time, purpose,
            participants, department, status, notified, created_by
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?)
        """,
        (
            event["program"],
            event["start_date"],
            event["start_time"],
            event["end_date"],
            event["end_time"],
            event["purpose"],
            encode_list(event["participants"]),
            encode_list(event["department"]),
            event["status"],
            event.get("created_by"),
        ),
    )
    return cursor.lastrowid


def update_event(conn: sqlite3.Connection, event_id: int, event: dict) -> bool:
    """Replace an event's fields; notified is cleared so reminders follow the new time."""
    cursor = conn.execute(
        """
        UPDATE schedule_events SET
            program = ?, start_date = ?, start_time = ?, end_date = ?, end_time = ?,
            purpose = ?, participants = ?, department = ?, status = ?, notified = 0
        WHERE id = ?
        """,
        (
            event["program"],
            event["start_date"],
            event["start_time"],
            event["end_date"],
            event["end_time"],
            event["purpose"],
            encode_list(event["participants"]),
            encode_list(event["department"]),
            event["status"],
            event_id,
        ),
    )
    return cursor.rowcount > 0


def delete_event(conn: sqlite3.Connection, event_id: int) -> bool:
    cursor = conn.execute("DELETE FROM schedule_events WHERE id = ?", (event_id,))
    return cursor.rowcount > 0


def set_event_status(conn: sqlite3.Connection, event_id: int, status: str) -> None:
    conn.execute("UPDATE schedule_events SET status = ? WHERE id = ?", (status, event_id))


def delete_events_ending_before(conn: sqlite3.Connection, cutoff: str) -> int:
    cursor = conn.execute(
        f"DELETE FROM schedule_events WHERE {EVENT_END_SQL} < ?", (cutoff,)
    )
    return cursor.rowcount


def delete_all_events(conn: sqlite3.Connection) -> int:
    cursor = conn.execute("DELETE FROM schedule_events")
    return cursor.rowcount


def list_unnotified_events_starting_between(
    conn: sqlite3.Connection, window_start: str, window_end: str
) -> list[EventRecord]:
    rows = conn.execute(
        f"""
        SELECT * FROM schedule_events
        WHERE notified = 0 AND {EVENT_START_SQL} BETWEEN ? AND ?
        ORDER BY start_date, start_time, id
        """,
        (window_start, window_end),
    ).fetchall()
    return [_event(row) for row in rows]


def mark_event_notified(conn: sqlite3.Connection, event_id: int) -> None:
    conn.execute("UPDATE schedule_events SET notified = 1 WHERE id = ?", (event_id,))


def list_events_in_range(
    conn: sqlite3.Connection, start_date: str, end_date: str
) -> list[EventRecord]:
    """Events starting on/after start_date and ending on/before end_date."""
    rows = conn.execute(
        """
        SELECT * FROM schedule_events
        WHERE start_date >= ? AND end_date <= ?
        ORDER BY start_date, start_time, id
        """,
        (start_date, end_date),
    ).fetchall()
    return [_event(row) for row in rows]


def list_events_in_month(conn: sqlite3.Connection, month: int, year: int) -> list[EventRecord]:
    rows = conn.execute(
        """
        SELECT * FROM schedule_events
        WHERE start_date LIKE ?
        ORDER BY start_date, start_time, id
        """,
        (f"{year:04d}-{month:02d}-%",),
    ).fetchall()
    return [_event(row) for row in rows]
