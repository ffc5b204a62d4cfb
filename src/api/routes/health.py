"""Health check, root banner and the status WebSocket."""

import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, PlainTextResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION
from core.database import get_connection
from services.notifications import broadcaster

router = APIRouter()


def database_available(db_path) -> bool:
    try:
        conn = get_connection(db_path)
        try:
            conn.execute("SELECT 1 FROM schedule_events LIMIT 1")
        finally:
            conn.close()
    except sqlite3.Error:
        return False
    return True


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Backend API is running!"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if unhealthy.
    """
    available = database_available(request.app.state.db_path)
    timestamp = datetime.now(timezone.utc).isoformat()

    if available:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            database_available=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                database_available=False,
                timestamp=timestamp,
                error="Database not reachable",
            ).model_dump(),
        )


@router.websocket("/ws")
async def status_updates(ws: WebSocket):
    """Push {"event": "statusUpdated"} whenever events change."""
    await broadcaster.connect(ws)
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        broadcaster.disconnect(ws)
