"""Post schemas (DTOs)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.features.user.schemas import UserSummary
from src.shared.pagination.pagination import PaginatedResponse


def _required_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()


# Request schemas
class PostCreateRequest(BaseModel):
    """Post creation request. ``author_id`` defaults to the caller."""

    title: str = Field(default=None, validate_default=True)  # type: ignore[assignment]
    content: str = Field(default=None, validate_default=True)  # type: ignore[assignment]
    author_id: int | None = None
    published: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, value: Any) -> str:
        return _required_text(value, "Title is required")

    @field_validator("content", mode="before")
    @classmethod
    def check_content(cls, value: Any) -> str:
        return _required_text(value, "Content is required")

    @field_validator("author_id", mode="before")
    @classmethod
    def check_author_id(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("Valid author_id is required")
        return value


class PostUpdateRequest(BaseModel):
    """Post update request. ``published`` is kept when omitted."""

    title: str = Field(default=None, validate_default=True)  # type: ignore[assignment]
    content: str = Field(default=None, validate_default=True)  # type: ignore[assignment]
    published: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, value: Any) -> str:
        return _required_text(value, "Title is required")

    @field_validator("content", mode="before")
    @classmethod
    def check_content(cls, value: Any) -> str:
        return _required_text(value, "Content is required")


# Response schemas
class PostResponse(BaseModel):
    """Post response with its author embedded."""

    id: int
    title: str
    content: str
    author_id: int
    published: bool
    created_at: datetime
    updated_at: datetime
    author: UserSummary

    model_config = {"from_attributes": True}


PostListResponse = PaginatedResponse[PostResponse]
