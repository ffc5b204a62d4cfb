"""Pydantic request bodies."""

from datetime import date, time

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class LoginRequest(RequestModel):
    employee_number: str = Field(min_length=1)
    password: str = Field(min_length=1)


class OfficeLoginRequest(RequestModel):
    idnumber: str = Field(min_length=1)


class ForgotPasswordRequest(RequestModel):
    email: str = Field(min_length=3)


class VerifyOtpRequest(RequestModel):
    email: str = Field(min_length=3)
    otp_code: str = Field(min_length=1)


class ResetPasswordRequest(VerifyOtpRequest):
    new_password: str = Field(min_length=6)


class CategoryCreate(RequestModel):
    idnumber: str = Field(min_length=1)
    office: str = Field(min_length=1)
    email: str = Field(min_length=3)
    department: str = Field(min_length=1)


class CategoryUpdate(RequestModel):
    office: str = Field(min_length=1)
    email: str = Field(min_length=3)
    department: str = Field(min_length=1)


class UserCreate(RequestModel):
    employee_number: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    type: str = Field(min_length=1)


class UserUpdate(RequestModel):
    employee_number: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str | None = None  # unchanged when omitted
    type: str = Field(min_length=1)


class EventCreate(RequestModel):
    program: str = Field(min_length=1)
    start_date: date
    start_time: time
    end_date: date
    end_time: time
    purpose: str = Field(min_length=1)
    participants: list[str] = Field(min_length=1)
    department: list[str] = Field(min_length=1)
    # None keeps the overnight roll-forward; False rejects end <= start
    crosses_midnight: bool | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def local_wall_clock(cls, value: time) -> time:
        """Times are local to the configured timezone; offsets are not accepted."""
        if value.tzinfo is not None:
            raise ValueError("time must not include a UTC offset")
        return value
