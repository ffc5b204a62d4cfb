"""Roster (category) endpoints."""

NEW_ENTRY = {"idnumber": "C-100", "office": "Cashier", "email": "cashier@example.org", "department": "SGOD"}


def test_create_and_list_category(client, admin_headers):
    response = client.post("/api/categories", json=NEW_ENTRY, headers=admin_headers)
    assert response.status_code == 201

    categories = client.get("/api/categories", headers=admin_headers).json()
    assert [c["office"] for c in categories] == ["Cashier"]


def test_duplicate_idnumber_is_409(client, admin_headers, registrar):
    payload = {**NEW_ENTRY, "idnumber": "R-001"}
    response = client.post("/api/categories", json=payload, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE"


def test_department_user_limited_to_own_department(client, sgod_headers):
    assert client.post("/api/categories", json=NEW_ENTRY, headers=sgod_headers).status_code == 201

    foreign = {**NEW_ENTRY, "idnumber": "C-200", "department": "CID"}
    assert client.post("/api/categories", json=foreign, headers=sgod_headers).status_code == 403


def test_edit_category(client, admin_headers, registrar):
    body = {"office": "Registrar Office", "email": "reg@example.org", "department": "CID"}
    response = client.put(f"/api/categories/{registrar['id']}", json=body, headers=admin_headers)
    assert response.status_code == 200

    category = client.get("/api/categories", headers=admin_headers).json()[0]
    assert category["office"] == "Registrar Office"
    assert category["department"] == "CID"
    assert category["idnumber"] == "R-001"


def test_department_user_cannot_move_entry_away(client, sgod_headers, registrar):
    body = {"office": "Registrar", "email": "reg@example.org", "department": "CID"}
    response = client.put(f"/api/categories/{registrar['id']}", json=body, headers=sgod_headers)
    assert response.status_code == 403


def test_delete_category(client, admin_headers, registrar):
    assert client.delete(f"/api/categories/{registrar['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/categories/{registrar['id']}", headers=admin_headers).status_code == 404


def test_departments_list_base_first(client, conn, admin_headers):
    from core.database import insert_category

    insert_category(conn, "X-1", "Lab", "lab@example.org", "ICT")
    insert_category(conn, "X-2", "Desk", "desk@example.org", "CID")

    departments = client.get("/api/department", headers=admin_headers).json()
    assert [d["department"] for d in departments] == ["SGOD", "CID", "OSDS", "ICT"]
