"""
Password hashing, access tokens and one-time codes.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from core.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    OTP_LENGTH,
    SECRET_KEY,
    TOKEN_ALGORITHM,
)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Salted hash for storage."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # Unrecognized hash format
        return False


def create_access_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Sign claims into a bearer token."""
    to_encode = dict(claims)
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the token's claims, or None if it is invalid or expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except JWTError:
        return None


def generate_otp() -> str:
    """Numeric one-time code with no leading zero (e.g. '482913')."""
    low = 10 ** (OTP_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


def otp_matches(expected: str | None, given: str | None) -> bool:
    if not expected or not given:
        return False
    return secrets.compare_digest(expected, given.strip())
