"""Pydantic response models for API endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ConflictInfo(BaseModel):
    """An existing event that blocks a booking."""

    event_id: int
    program: str
    start: str
    end: str
    participants: list[str]


class ConflictResponse(ErrorResponse):
    """409 body for booking conflicts."""

    conflicts: list[ConflictInfo] = []


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UserOut(BaseModel):
    id: int
    employee_number: str
    email: str
    type: str


class OfficeUserOut(BaseModel):
    """Roster entry signed in as an office user."""

    id: int
    idnumber: str
    office: str
    email: str
    department: str
    type: str


class LoginResponse(BaseModel):
    user: UserOut | OfficeUserOut
    access_token: str
    token_type: str = "bearer"
    success: bool = True


class CategoryOut(BaseModel):
    id: int
    idnumber: str
    office: str
    email: str
    department: str


class DepartmentOut(BaseModel):
    department: str


class EventOut(BaseModel):
    id: int
    program: str
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    purpose: str
    participants: list[str]
    department: list[str]
    status: str
    created_by: str | None = None


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    MAIL_ERROR = "MAIL_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
