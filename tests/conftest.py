"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from pathlib import Path

import pytest
from faker import Faker

# Background jobs stay off under test; must be set before config is imported
os.environ.setdefault("ENABLE_SCHEDULER", "false")
os.environ.setdefault("SECRET_KEY", "test-secret")

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.database import get_connection, init_schema, insert_category, insert_user  # noqa: E402
from core.security import create_access_token, hash_password  # noqa: E402

fake = Faker()
Faker.seed(1234)


@pytest.fixture
def db_path(tmp_path):
    """Fresh database file with the schema created."""
    path = tmp_path / "scheduler.db"
    conn = get_connection(path)
    init_schema(conn)
    conn.close()
    return path


@pytest.fixture
def conn(db_path):
    connection = get_connection(db_path)
    yield connection
    connection.close()


@pytest.fixture
def client(db_path):
    """TestClient bound to the temporary database (lifespan not started)."""
    from fastapi.testclient import TestClient

    from api.main import app

    app.state.db_path = db_path
    return TestClient(app)


@pytest.fixture
def sent_mail(monkeypatch):
    """Record outgoing mail instead of calling MS Graph."""
    sent = []

    async def fake_send(to, subject, body_text, attachment_path=None):
        sent.append({"to": to, "subject": subject, "body": body_text})

    monkeypatch.setattr("services.email.send_email", fake_send)
    return sent


def make_user(conn, employee_number, user_type, password="password123", email=None):
    email = email or fake.unique.email()
    user_id = insert_user(conn, employee_number, email, hash_password(password), user_type)
    return {"id": user_id, "employee_number": employee_number, "email": email, "type": user_type}


def token_headers(user: dict) -> dict:
    token = create_access_token(
        {"sub": str(user["id"]), "kind": "user", "type": user["type"], "email": user["email"]}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(conn):
    return make_user(conn, "1000001", "Administrator", email="admin@example.org")


@pytest.fixture
def admin_headers(admin):
    return token_headers(admin)


@pytest.fixture
def sgod_user(conn):
    return make_user(conn, "1000002", "SGOD", email="sgod@example.org")


@pytest.fixture
def sgod_headers(sgod_user):
    return token_headers(sgod_user)


@pytest.fixture
def registrar(conn):
    """Roster entry for the Registrar office in SGOD."""
    category_id = insert_category(conn, "R-001", "Registrar", "registrar@example.org", "SGOD")
    return {"id": category_id, "idnumber": "R-001", "office": "Registrar", "department": "SGOD"}


@pytest.fixture
def office_headers(registrar):
    token = create_access_token({"sub": str(registrar["id"]), "kind": "office", "type": "OfficeUser"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sample_event():
    """Event payload as the front end sends it."""
    return {
        "program": "Orientation",
        "start_date": "2024-01-10",
        "start_time": "09:00",
        "end_date": "2024-01-10",
        "end_time": "10:00",
        "purpose": "New staff orientation",
        "participants": ["Registrar"],
        "department": ["SGOD"],
    }
