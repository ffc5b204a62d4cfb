"""Login, office login and OTP-based password reset."""

import sqlite3
from datetime import timedelta

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import CurrentUser, api_error, get_db, require_admin
from api.models import (
    ErrorCodes,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OfficeLoginRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from core.config import OFFICE_USER_TYPE, OTP_EXPIRE_MINUTES
from core.database import (
    get_category_by_idnumber,
    get_user_by_email,
    get_user_credentials,
    reset_user_password,
    set_user_otp,
)
from core.security import (
    create_access_token,
    generate_otp,
    hash_password,
    otp_matches,
    verify_password,
)
from core.timeutils import local_now, to_sql
from services.email import (
    MailError,
    send_otp_email,
    send_password_changed_email,
    send_test_email,
)

router = APIRouter(prefix="/api")


def _valid_otp_user(conn: sqlite3.Connection, email: str, otp_code: str) -> sqlite3.Row:
    """User row for a matching, unexpired OTP; 400 otherwise."""
    user = get_user_by_email(conn, email)
    if (
        user is None
        or not otp_matches(user["otp_code"], otp_code)
        or not user["otp_expires"]
        or user["otp_expires"] <= to_sql(local_now())
    ):
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid or expired OTP",
            ErrorCodes.INVALID_REQUEST,
        )
    return user


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, conn: sqlite3.Connection = Depends(get_db)):
    """Dashboard login with employee number and password."""
    user = get_user_credentials(conn, body.employee_number)
    if user is None or not verify_password(body.password, user["password_hash"]):
        raise api_error(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid credentials",
            ErrorCodes.UNAUTHORIZED,
        )

    token = create_access_token(
        {"sub": str(user["id"]), "kind": "user", "type": user["type"], "email": user["email"]}
    )
    return LoginResponse(
        user={
            "id": user["id"],
            "email": user["email"],
            "type": user["type"],
            "employee_number": user["employee_number"],
        },
        access_token=token,
    )


@router.post("/login1", response_model=LoginResponse)
def office_login(body: OfficeLoginRequest, conn: sqlite3.Connection = Depends(get_db)):
    """Office login with a roster ID number; the caller acts as that office."""
    category = get_category_by_idnumber(conn, body.idnumber)
    if category is None:
        raise api_error(status.HTTP_404_NOT_FOUND, "User not found", ErrorCodes.NOT_FOUND)

    token = create_access_token(
        {"sub": str(category["id"]), "kind": "office", "type": OFFICE_USER_TYPE}
    )
    return LoginResponse(user={**category, "type": OFFICE_USER_TYPE}, access_token=token)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest, conn: sqlite3.Connection = Depends(get_db)):
    """Store a fresh OTP for the account and e-mail it."""
    user = get_user_by_email(conn, body.email)
    if user is None:
        raise api_error(status.HTTP_404_NOT_FOUND, "User not found", ErrorCodes.NOT_FOUND)

    otp = generate_otp()
    expires = local_now() + timedelta(minutes=OTP_EXPIRE_MINUTES)
    set_user_otp(conn, user["id"], otp, to_sql(expires))

    try:
        await send_otp_email(user["email"], otp)
    except MailError as e:
        raise api_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to send OTP",
            ErrorCodes.MAIL_ERROR,
            [str(e)],
        )

    return MessageResponse(message="OTP sent to your email")


@router.post("/verify-otp", response_model=MessageResponse)
def verify_otp(body: VerifyOtpRequest, conn: sqlite3.Connection = Depends(get_db)):
    _valid_otp_user(conn, body.email, body.otp_code)
    return MessageResponse(message="OTP verified")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, conn: sqlite3.Connection = Depends(get_db)):
    """Set a new password with a valid OTP, then notify the account owner."""
    user = _valid_otp_user(conn, body.email, body.otp_code)
    reset_user_password(conn, user["id"], hash_password(body.new_password))

    try:
        await send_password_changed_email(user["email"])
    except MailError as e:
        raise api_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Password updated, but failed to notify via email.",
            ErrorCodes.MAIL_ERROR,
            [str(e)],
        )

    return MessageResponse(message="Password changed and email notification sent.")


@router.get("/test-email", response_model=MessageResponse)
async def test_email(
    to: str | None = Query(default=None),
    admin: CurrentUser = Depends(require_admin),
):
    """Send a test message (defaults to the caller's address)."""
    recipient = to or admin.email
    try:
        await send_test_email(recipient)
    except MailError as e:
        raise api_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to send test email",
            ErrorCodes.MAIL_ERROR,
            [str(e)],
        )
    return MessageResponse(message=f"Test email sent to {recipient}")
