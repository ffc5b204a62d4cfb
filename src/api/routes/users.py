"""Dashboard account management."""

import re
import sqlite3

from fastapi import APIRouter, Depends, status

from api.dependencies import (
    CurrentUser,
    api_error,
    get_db,
    get_optional_user,
    require_admin,
    require_dashboard_user,
)
from api.models import ErrorCodes, UserCreate, UserOut, UserUpdate
from core.config import (
    ALLOW_REGISTRATION,
    EMPLOYEE_NUMBER_PATTERN,
    FIXED_USER_TYPES,
    USER_TYPES,
)
from core.database import (
    delete_user,
    employee_number_taken,
    get_user,
    insert_user,
    list_users,
    update_user,
    user_type_taken,
    write_transaction,
)
from core.security import hash_password

router = APIRouter(prefix="/api")


def _validate_account(employee_number: str, user_type: str):
    if not re.match(EMPLOYEE_NUMBER_PATTERN, employee_number):
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "Employee number must be exactly 7 digits.",
            ErrorCodes.VALIDATION_ERROR,
        )
    if user_type not in USER_TYPES:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            f"Unknown user type '{user_type}'.",
            ErrorCodes.VALIDATION_ERROR,
            [f"Allowed: {', '.join(USER_TYPES)}"],
        )


def _check_unique(conn: sqlite3.Connection, employee_number: str, user_type: str, exclude_id=None):
    if user_type in FIXED_USER_TYPES and user_type_taken(conn, user_type, exclude_id):
        raise api_error(
            status.HTTP_409_CONFLICT,
            f"A user with type {user_type} already exists.",
            ErrorCodes.DUPLICATE,
        )
    if employee_number_taken(conn, employee_number, exclude_id):
        raise api_error(
            status.HTTP_409_CONFLICT,
            "Employee number already exists.",
            ErrorCodes.DUPLICATE,
        )


@router.get("/users", response_model=list[UserOut])
def get_users(
    conn: sqlite3.Connection = Depends(get_db),
    _user: CurrentUser = Depends(require_dashboard_user),
):
    return list_users(conn)


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    conn: sqlite3.Connection = Depends(get_db),
    caller: CurrentUser | None = Depends(get_optional_user),
):
    """
    Create an account.

    Open to anonymous sign-up when registration is enabled; otherwise only
    administrators may create accounts.
    """
    if not (caller and caller.is_admin) and not ALLOW_REGISTRATION:
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "Administrator access required",
            ErrorCodes.FORBIDDEN,
        )

    _validate_account(body.employee_number, body.type)

    with write_transaction(conn):
        _check_unique(conn, body.employee_number, body.type)
        user_id = insert_user(
            conn, body.employee_number, body.email, hash_password(body.password), body.type
        )

    return {"success": True, "id": user_id}


@router.put("/users/{user_id}")
def edit_user(
    user_id: int,
    body: UserUpdate,
    conn: sqlite3.Connection = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
):
    _validate_account(body.employee_number, body.type)

    with write_transaction(conn):
        if get_user(conn, user_id) is None:
            raise api_error(status.HTTP_404_NOT_FOUND, "User not found.", ErrorCodes.NOT_FOUND)
        _check_unique(conn, body.employee_number, body.type, exclude_id=user_id)
        update_user(
            conn,
            user_id,
            body.employee_number,
            body.email,
            body.type,
            password_hash=hash_password(body.password) if body.password else None,
        )

    return {"success": True}


@router.delete("/users/{user_id}")
def remove_user(
    user_id: int,
    conn: sqlite3.Connection = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    if user_id == admin.id:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "You cannot delete your own account.",
            ErrorCodes.INVALID_REQUEST,
        )
    if not delete_user(conn, user_id):
        raise api_error(status.HTTP_404_NOT_FOUND, "User not found.", ErrorCodes.NOT_FOUND)
    return {"success": True}
