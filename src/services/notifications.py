"""
Real-time "status updated" push to connected WebSocket clients.

Clients treat the message as a signal to re-fetch; there is no payload
contract and no delivery guarantee.
"""

import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)

STATUS_UPDATED = "statusUpdated"


class StatusBroadcaster:
    """Tracks open sockets and fans out change notifications."""

    def __init__(self):
        self.clients: set[WebSocket] = set()

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.clients.add(ws)

    def disconnect(self, ws: WebSocket) -> None:
        self.clients.discard(ws)

    async def broadcast(self, event: str = STATUS_UPDATED) -> int:
        """Send to every client, dropping sockets that fail. Returns deliveries."""
        delivered = 0
        for ws in list(self.clients):
            try:
                await ws.send_json({"event": event})
                delivered += 1
            except Exception as e:
                logger.info("Dropping websocket client: %s", e)
                self.disconnect(ws)
        return delivered


broadcaster = StatusBroadcaster()


async def notify_status_updated() -> None:
    await broadcaster.broadcast(STATUS_UPDATED)
