#!/usr/bin/env python3
"""
Create the scheduler SQLite3 database, optionally seeding an administrator.

Usage:
    python src/scripts/init_db.py
    python src/scripts/init_db.py --admin-employee-number 1234567 \
        --admin-email admin@example.org --admin-password secret
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ADMIN_TYPE, DB_PATH
from core.database import get_connection, init_schema, insert_user, user_type_taken
from core.security import hash_password


def create_database(db_path: Path = DB_PATH):
    """Create the database and tables if they don't exist."""
    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    try:
        init_schema(conn)
    finally:
        conn.close()
    print(f"Database created successfully at: {db_path}")


def seed_admin(employee_number: str, email: str, password: str, db_path: Path = DB_PATH) -> bool:
    """Create the administrator account unless one exists. Returns True if created."""
    conn = get_connection(db_path)
    try:
        if user_type_taken(conn, ADMIN_TYPE):
            print("An Administrator account already exists, skipping.")
            return False
        user_id = insert_user(conn, employee_number, email, hash_password(password), ADMIN_TYPE)
    finally:
        conn.close()
    print(f"Created Administrator account (ID: {user_id})")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the scheduler database")
    parser.add_argument("--admin-employee-number", help="7-digit employee number")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()

    create_database()

    admin_args = (args.admin_employee_number, args.admin_email, args.admin_password)
    if any(admin_args):
        if not all(admin_args):
            parser.error("--admin-employee-number, --admin-email and --admin-password go together")
        seed_admin(*admin_args)
