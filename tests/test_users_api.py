"""Dashboard account management."""

import pytest

from conftest import make_user


def new_user(**overrides):
    payload = {
        "employee_number": "2000001",
        "email": "osds@example.org",
        "password": "password123",
        "type": "OSDS",
    }
    payload.update(overrides)
    return payload


def test_create_user_stores_hash(client, conn, admin_headers):
    response = client.post("/api/users", json=new_user(), headers=admin_headers)
    assert response.status_code == 201

    stored = conn.execute(
        "SELECT password_hash FROM users WHERE employee_number = '2000001'"
    ).fetchone()[0]
    assert stored != "password123"
    assert stored.startswith("$pbkdf2-sha256$")


@pytest.mark.parametrize("employee_number", ["123456", "12345678", "12345a7"])
def test_employee_number_must_be_seven_digits(client, admin_headers, employee_number):
    response = client.post(
        "/api/users", json=new_user(employee_number=employee_number), headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_unknown_type_is_400(client, admin_headers):
    response = client.post("/api/users", json=new_user(type="Janitor"), headers=admin_headers)
    assert response.status_code == 400


def test_fixed_type_is_unique(client, admin_headers, sgod_user):
    response = client.post(
        "/api/users", json=new_user(type="SGOD"), headers=admin_headers
    )
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE"


def test_employee_number_is_unique(client, admin_headers, sgod_user):
    response = client.post(
        "/api/users", json=new_user(employee_number=sgod_user["employee_number"]), headers=admin_headers
    )
    assert response.status_code == 409


def test_list_users_requires_dashboard_account(client, admin_headers, office_headers):
    assert client.get("/api/users", headers=office_headers).status_code == 403

    users = client.get("/api/users", headers=admin_headers).json()
    assert [u["type"] for u in users] == ["Administrator"]
    assert "password_hash" not in users[0]


def test_edit_user_is_admin_only(client, conn, admin_headers, sgod_headers, sgod_user):
    body = new_user(employee_number="1000002", email="new@example.org", type="SGOD")
    del body["password"]

    assert client.put(f"/api/users/{sgod_user['id']}", json=body, headers=sgod_headers).status_code == 403
    assert client.put(f"/api/users/{sgod_user['id']}", json=body, headers=admin_headers).status_code == 200

    email = conn.execute("SELECT email FROM users WHERE id = ?", (sgod_user["id"],)).fetchone()[0]
    assert email == "new@example.org"

    # Password untouched when omitted
    login = client.post("/api/login", json={"employee_number": "1000002", "password": "password123"})
    assert login.status_code == 200


def test_edit_unknown_user_is_404(client, admin_headers):
    response = client.put("/api/users/999", json=new_user(), headers=admin_headers)
    assert response.status_code == 404


def test_delete_user(client, conn, admin_headers):
    user = make_user(conn, "3000001", "CID")
    assert client.delete(f"/api/users/{user['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404


def test_admin_cannot_delete_self(client, admin, admin_headers):
    response = client.delete(f"/api/users/{admin['id']}", headers=admin_headers)
    assert response.status_code == 400


def test_office_user_type_cannot_be_registered(client):
    response = client.post("/api/users", json=new_user(type="OfficeUser"))
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
