"""FastAPI dependencies for authentication and shared resources."""

import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.models.responses import ErrorCodes
from core.config import ADMIN_TYPE, DASHBOARD_TYPES, DB_PATH, OFFICE_USER_TYPE
from core.database import get_category, get_connection, get_user
from core.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def api_error(
    status_code: int, error: str, code: str, details: list[str] | None = None
) -> HTTPException:
    """HTTPException carrying the standard error body."""
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "code": code, "details": details or []},
    )


def get_db(request: Request) -> Iterator[sqlite3.Connection]:
    """One connection per request, to the database configured on the app."""
    conn = get_connection(getattr(request.app.state, "db_path", DB_PATH))
    try:
        yield conn
    finally:
        conn.close()


@dataclass
class CurrentUser:
    """The authenticated caller, from a verified token."""

    id: int
    type: str
    email: str
    office: str | None = None
    department: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.type == ADMIN_TYPE

    @property
    def is_office_user(self) -> bool:
        return self.type == OFFICE_USER_TYPE

    @property
    def own_department(self) -> str | None:
        """Department this caller may act for (None for administrators)."""
        if self.is_admin:
            return None
        if self.is_office_user:
            return self.department
        return self.type

    def can_act_for(self, department: str) -> bool:
        if self.is_admin:
            return True
        own = self.own_department
        return bool(own) and own.strip().lower() == department.strip().lower()


def _load_user(conn: sqlite3.Connection, claims: dict) -> CurrentUser | None:
    try:
        subject_id = int(claims.get("sub", ""))
    except ValueError:
        return None

    if claims.get("kind") == "office":
        category = get_category(conn, subject_id)
        if category is None:
            return None
        return CurrentUser(
            id=category["id"],
            type=OFFICE_USER_TYPE,
            email=category["email"],
            office=category["office"],
            department=category["department"],
        )

    user = get_user(conn, subject_id)
    if user is None:
        return None
    return CurrentUser(id=user["id"], type=user["type"], email=user["email"])


def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    conn: sqlite3.Connection = Depends(get_db),
) -> CurrentUser | None:
    """Caller from the bearer token, or None when no token was sent."""
    if credentials is None:
        return None

    claims = decode_access_token(credentials.credentials)
    user = _load_user(conn, claims) if claims else None
    if user is None:
        raise api_error(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid or expired token",
            ErrorCodes.UNAUTHORIZED,
        )

    # Picked up by the request logging middleware
    request.state.user_email = user.email
    return user


def get_current_user(user: CurrentUser | None = Depends(get_optional_user)) -> CurrentUser:
    """
    Require a valid bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if user is None:
        raise api_error(
            status.HTTP_401_UNAUTHORIZED,
            "Authentication required",
            ErrorCodes.UNAUTHORIZED,
        )
    return user


def require_dashboard_user(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Administrators and department accounts (not office logins)."""
    if user.type not in DASHBOARD_TYPES:
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "Dashboard access required",
            ErrorCodes.FORBIDDEN,
        )
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "Administrator access required",
            ErrorCodes.FORBIDDEN,
        )
    return user
