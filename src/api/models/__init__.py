"""API Pydantic models."""

from .requests import (
    CategoryCreate,
    CategoryUpdate,
    EventCreate,
    ForgotPasswordRequest,
    LoginRequest,
    OfficeLoginRequest,
    ResetPasswordRequest,
    UserCreate,
    UserUpdate,
    VerifyOtpRequest,
)
from .responses import (
    CategoryOut,
    ConflictResponse,
    DepartmentOut,
    ErrorCodes,
    ErrorResponse,
    EventOut,
    HealthResponse,
    LoginResponse,
    MessageResponse,
    UserOut,
)

__all__ = [
    "CategoryCreate",
    "CategoryOut",
    "CategoryUpdate",
    "ConflictResponse",
    "DepartmentOut",
    "ErrorCodes",
    "ErrorResponse",
    "EventCreate",
    "EventOut",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "OfficeLoginRequest",
    "ResetPasswordRequest",
    "UserCreate",
    "UserOut",
    "UserUpdate",
    "VerifyOtpRequest",
]
