"""Roster (category) endpoints and the department list."""

import sqlite3

from fastapi import APIRouter, Depends, status

from api.dependencies import CurrentUser, api_error, get_current_user, get_db
from api.models import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    DepartmentOut,
    ErrorCodes,
    MessageResponse,
)
from core.config import BASE_DEPARTMENTS
from core.database import (
    delete_category,
    get_category,
    insert_category,
    list_categories,
    list_category_departments,
    update_category,
)

router = APIRouter(prefix="/api")


def _require_department_access(user: CurrentUser, department: str, action: str):
    if not user.can_act_for(department):
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            f"You can only {action} categories for your own department.",
            ErrorCodes.FORBIDDEN,
        )


def _existing_category(conn: sqlite3.Connection, category_id: int) -> dict:
    category = get_category(conn, category_id)
    if category is None:
        raise api_error(status.HTTP_404_NOT_FOUND, "Category not found", ErrorCodes.NOT_FOUND)
    return category


@router.get("/categories", response_model=list[CategoryOut])
def get_categories(
    conn: sqlite3.Connection = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    return list_categories(conn)


@router.get("/department", response_model=list[DepartmentOut])
def get_departments(
    conn: sqlite3.Connection = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    """Base departments first, then any others used on the roster."""
    departments = list(BASE_DEPARTMENTS)
    for department in list_category_departments(conn):
        if department not in departments:
            departments.append(department)
    return [{"department": d} for d in departments]


@router.post("/categories", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    _require_department_access(user, body.department, "add")

    try:
        insert_category(conn, body.idnumber, body.office, body.email, body.department)
    except sqlite3.IntegrityError:
        raise api_error(
            status.HTTP_409_CONFLICT,
            "Insert failed. Duplicate ID number.",
            ErrorCodes.DUPLICATE,
            [f"ID number: {body.idnumber}"],
        )

    return MessageResponse(message="Category added")


@router.put("/categories/{category_id}", response_model=MessageResponse)
def edit_category(
    category_id: int,
    body: CategoryUpdate,
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    category = _existing_category(conn, category_id)
    _require_department_access(user, category["department"], "edit")
    # Moving an entry to another department needs rights there too
    _require_department_access(user, body.department, "edit")

    update_category(conn, category_id, body.office, body.email, body.department)
    return MessageResponse(message="Category updated")


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def remove_category(
    category_id: int,
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Delete a roster entry; events that booked it keep their participant names."""
    category = _existing_category(conn, category_id)
    _require_department_access(user, category["department"], "delete")

    delete_category(conn, category_id)
    return MessageResponse(message="Category deleted")
