"""User schemas (DTOs)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.shared.pagination.pagination import PaginatedResponse

from .models import UserRole


def _validate_name(value: Any) -> str:
    if not isinstance(value, str) or len(value.strip()) < 2:
        raise ValueError("Name is required and must be at least 2 characters")
    return value.strip()


def _validate_email_presence(value: Any) -> str:
    if not isinstance(value, str) or "@" not in value:
        raise ValueError("Valid email is required")
    return value.strip()


def _validate_role(value: Any) -> Any:
    if value is not None and value not in {role.value for role in UserRole}:
        raise ValueError('Role must be either "user" or "admin"')
    return value


# Request schemas
class UserCreateRequest(BaseModel):
    """User creation request.

    Uses EmailStr (email-validator) after the presence check, so the error
    list stays human-readable for the common cases.
    """

    name: str = Field(default=None, validate_default=True)  # type: ignore[assignment]
    email: EmailStr = Field(default=None, validate_default=True)  # type: ignore[assignment]
    role: UserRole | None = None
    password: str | None = Field(None, min_length=8, description="Defaults to the configured demo password")

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value: Any) -> str:
        return _validate_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value: Any) -> str:
        return _validate_email_presence(value)

    @field_validator("role", mode="before")
    @classmethod
    def check_role(cls, value: Any) -> Any:
        return _validate_role(value)


class UserUpdateRequest(UserCreateRequest):
    """User update request (full replacement of name/email, role kept when omitted)."""


# Response schemas
class UserResponse(BaseModel):
    """User response."""

    id: int
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Compact user block embedded in other resources."""

    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


UserListResponse = PaginatedResponse[UserResponse]
