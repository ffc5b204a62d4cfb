"""Status broadcast over WebSocket."""

import asyncio

from fastapi.testclient import TestClient

from services.notifications import StatusBroadcaster


class FakeSocket:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def accept(self):
        pass

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("closed")
        self.sent.append(data)


def test_broadcast_drops_failing_clients():
    hub = StatusBroadcaster()
    good, bad = FakeSocket(), FakeSocket(fail=True)

    async def run():
        await hub.connect(good)
        await hub.connect(bad)
        return await hub.broadcast()

    assert asyncio.run(run()) == 1
    assert good.sent == [{"event": "statusUpdated"}]
    assert hub.clients == {good}


def test_event_change_is_pushed_to_websocket(db_path, admin_headers, sample_event):
    from api.main import app

    app.state.db_path = db_path
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            response = client.post("/api/events", json=sample_event, headers=admin_headers)
            assert response.status_code == 201
            assert ws.receive_json() == {"event": "statusUpdated"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database_available"] is True
    assert client.get("/").text == "Backend API is running!"
