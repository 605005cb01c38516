# user.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from user_registration.models.user import GENDERS
from user_registration.utils.password_hash import MAX_PASSWORD_BYTES


MIN_AGE = 0
MAX_AGE = 150


def _validate_email_like(v: str) -> str:
    value = (v or "").strip().lower()
    if "@" not in value:
        raise ValueError("email must contain '@'")
    left, right = value.split("@", 1)
    if not left or not right:
        raise ValueError("email must have text before and after '@'")
    return value


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class RegistrationForm(BaseModel):
    fullname: str
    email: str
    password: str
    age: Optional[int] = None
    gender: Optional[str] = None

    @field_validator("fullname")
    @classmethod
    def _validate_fullname(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("Full name must not be empty")
        return value

    @field_validator("email")
    @classmethod
    def _validate_email(cls, v: str) -> str:
        return _validate_email_like(v)

    @field_validator("password")
    @classmethod
    def _validate_password(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v

    @field_validator("age", mode="before")
    @classmethod
    def _validate_age(cls, v: Any) -> Optional[int]:
        v = _blank_to_none(v)
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("Age must be a whole number")
        try:
            age = int(str(v).strip())
        except ValueError as exc:
            raise ValueError("Age must be a whole number") from exc
        if not MIN_AGE <= age <= MAX_AGE:
            raise ValueError(f"Age must be between {MIN_AGE} and {MAX_AGE}")
        return age

    @field_validator("gender", mode="before")
    @classmethod
    def _validate_gender(cls, v: Any) -> Optional[str]:
        v = _blank_to_none(v)
        if v is None:
            return None
        value = str(v).strip().lower()
        if value not in GENDERS:
            raise ValueError(f"Gender must be one of: {', '.join(GENDERS)}")
        return value


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserRead(BaseModel):
    id: int
    fullname: str
    email: str
    age: Optional[int] = None
    gender: Optional[str] = None
    profile_image: Optional[str] = None
    cv_filename: Optional[str] = None
    reg_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(BaseModel):
    message: str
    user_id: int = Field(alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class LoginResponse(BaseModel):
    message: str
    user: UserRead


class DashboardResponse(BaseModel):
    user: UserRead


class ErrorResponse(BaseModel):
    error: str
