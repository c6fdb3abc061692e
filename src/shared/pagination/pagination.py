"""Pagination utilities and models for API responses."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Query parameters for pagination.

    Can be used as dependency in FastAPI routes:
    ```python
    @router.get("/items")
    async def list_items(pagination: PaginationParams = Depends()):
        stmt = select(Item).offset(pagination.skip).limit(pagination.limit)
    ```
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=10, ge=1, le=1000, description="Items per page")

    @property
    def skip(self) -> int:
        """Calculate skip/offset for database query."""
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    """Pagination block returned next to the items."""

    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "PaginationMeta":
        total_pages = (total + params.limit - 1) // params.limit
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            totalPages=total_pages,
            hasNext=params.skip + params.limit < total,
            hasPrev=params.page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response model: ``{"items": [...], "pagination": {...}}``."""

    items: list[T]
    pagination: PaginationMeta

    @classmethod
    def create(cls, items: list[T], params: PaginationParams, total: int) -> "PaginatedResponse[T]":
        return cls(items=items, pagination=PaginationMeta.build(params, total))


__all__ = ["PaginatedResponse", "PaginationMeta", "PaginationParams"]
