"""Event booking endpoints."""

import sqlite3

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from api.dependencies import CurrentUser, api_error, get_current_user, get_db
from api.models import ConflictResponse, ErrorCodes, EventCreate, EventOut
from core.database import delete_event, get_event, list_events
from core.timeutils import local_now
from core.validation import BookingConflictError, normalize_participant
from services.notifications import notify_status_updated
from services.scheduling import build_event, create_booking, update_booking

router = APIRouter(prefix="/api")


def can_manage_event(user: CurrentUser, event: dict) -> bool:
    """
    Administrators manage everything, office users the events booking their
    office, department users the events tagged with their department.
    """
    if user.is_admin:
        return True
    if user.is_office_user:
        office = normalize_participant(user.office or "")
        return any(normalize_participant(p) == office for p in event["participants"])
    return any(user.can_act_for(d) for d in event["department"])


def _event_fields(body: EventCreate, user: CurrentUser) -> tuple[list[str], list[str]]:
    """Participants and departments the caller is allowed to book."""
    if user.is_office_user:
        if not user.office or not user.department:
            raise api_error(
                status.HTTP_403_FORBIDDEN,
                "This account is not linked to a roster office.",
                ErrorCodes.FORBIDDEN,
            )
        return [user.office], [user.department]

    foreign = [d for d in body.department if not user.can_act_for(d)]
    if foreign:
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "You can only book events for your own department.",
            ErrorCodes.FORBIDDEN,
            [f"Not allowed: {', '.join(foreign)}"],
        )
    return body.participants, body.department


def _conflict_error(e: BookingConflictError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=ConflictResponse(
            error=f"Conflict: {e}",
            code=ErrorCodes.BOOKING_CONFLICT,
            details=[c.describe() for c in e.conflicts],
            conflicts=[c.as_dict() for c in e.conflicts],
        ).model_dump(),
    )


def _prepare(body: EventCreate, user: CurrentUser) -> dict:
    participants, department = _event_fields(body, user)
    try:
        return build_event(
            program=body.program,
            start_date=body.start_date,
            start_time=body.start_time,
            end_date=body.end_date,
            end_time=body.end_time,
            purpose=body.purpose,
            participants=participants,
            department=department,
            now=local_now(),
            crosses_midnight=body.crosses_midnight,
            created_by=user.email,
        )
    except ValueError as e:
        raise api_error(status.HTTP_400_BAD_REQUEST, str(e), ErrorCodes.VALIDATION_ERROR)


def _existing_event(conn: sqlite3.Connection, event_id: int, user: CurrentUser, action: str) -> dict:
    event = get_event(conn, event_id)
    if event is None:
        raise api_error(status.HTTP_404_NOT_FOUND, "Event not found", ErrorCodes.NOT_FOUND)
    if not can_manage_event(user, event):
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            f"You are not allowed to {action} this event.",
            ErrorCodes.FORBIDDEN,
        )
    return event


@router.get("/events", response_model=list[EventOut])
def get_events(
    conn: sqlite3.Connection = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    return list_events(conn)


@router.post(
    "/events",
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ConflictResponse}},
)
def create_event(
    body: EventCreate,
    background_tasks: BackgroundTasks,
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    event = _prepare(body, user)
    try:
        event_id = create_booking(conn, event)
    except BookingConflictError as e:
        raise _conflict_error(e)

    background_tasks.add_task(notify_status_updated)
    return {"message": "Event added successfully", "id": event_id}


@router.put("/events/{event_id}", responses={409: {"model": ConflictResponse}})
def edit_event(
    event_id: int,
    body: EventCreate,
    background_tasks: BackgroundTasks,
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    _existing_event(conn, event_id, user, "edit")
    event = _prepare(body, user)
    try:
        updated = update_booking(conn, event_id, event)
    except BookingConflictError as e:
        raise _conflict_error(e)
    if not updated:
        # Deleted since the permission check
        raise api_error(status.HTTP_404_NOT_FOUND, "Event not found", ErrorCodes.NOT_FOUND)

    background_tasks.add_task(notify_status_updated)
    return {"message": "Event updated successfully", "id": event_id}


@router.delete("/events/{event_id}")
def remove_event(
    event_id: int,
    background_tasks: BackgroundTasks,
    conn: sqlite3.Connection = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    _existing_event(conn, event_id, user, "delete")
    delete_event(conn, event_id)

    background_tasks.add_task(notify_status_updated)
    return {"message": "Event deleted successfully"}
