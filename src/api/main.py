"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.logging import RequestLog, get_client_ip, log_request
from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import (
    auth_router,
    categories_router,
    events_router,
    health_router,
    reports_router,
    users_router,
)
from core.config import API_DEBUG, API_VERSION, CORS_ORIGINS, DB_PATH, ENABLE_SCHEDULER
from core.database import get_connection, init_schema
from services.jobs import JobScheduler

logger = logging.getLogger(__name__)

STATUS_CODES = {
    401: ErrorCodes.UNAUTHORIZED,
    403: ErrorCodes.FORBIDDEN,
    404: ErrorCodes.NOT_FOUND,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: make sure the schema exists, then start housekeeping jobs
    app.state.db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(app.state.db_path)
    try:
        init_schema(conn)
    finally:
        conn.close()

    scheduler = None
    if ENABLE_SCHEDULER:
        scheduler = JobScheduler(app.state.db_path)
        scheduler.start()

    yield

    # Shutdown: stop background jobs
    if scheduler is not None:
        await scheduler.stop()


app = FastAPI(
    title="Department Event Scheduler API",
    description="REST API for booking department events, managing the office roster and exporting reports",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)
app.state.db_path = DB_PATH

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if API_DEBUG else CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Record every request in the api_requests table."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint=request.url.path,
        method=request.method,
        client_ip=get_client_ip(request),
    )

    try:
        response = await call_next(request)
        request_log.status_code = response.status_code
        return response
    except Exception as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        raise
    finally:
        request_log.user_email = getattr(request.state, "user_email", None)
        request_log.error_code = request_log.error_code or getattr(request.state, "error_code", None)
        request_log.error_message = request_log.error_message or getattr(
            request.state, "error_message", None
        )
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        try:
            log_request(request_log, request.app.state.db_path)
        except Exception as e:
            # Don't fail the request if logging fails
            logger.warning("Request logging failed: %s", e)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTPException details in the standard error format."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = ErrorResponse(
            error=str(exc.detail),
            code=STATUS_CODES.get(exc.status_code, ErrorCodes.INVALID_REQUEST),
        ).model_dump()

    request.state.error_code = content.get("code")
    request.state.error_message = content.get("error")
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a 400 with one detail per field."""
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))

    request.state.error_code = ErrorCodes.VALIDATION_ERROR
    request.state.error_message = "All fields are required."
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="All fields are required.",
            code=ErrorCodes.VALIDATION_ERROR,
            details=details,
        ).model_dump(),
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(categories_router)
app.include_router(users_router)
app.include_router(events_router)
app.include_router(reports_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
