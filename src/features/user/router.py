"""User management router (API endpoints)."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.shared.pagination.pagination import PaginationParams

from .exceptions import UserNotFound
from .schemas import UserCreateRequest, UserListResponse, UserResponse, UserUpdateRequest
from .service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    pagination: PaginationParams = Depends(),
    search: str | None = Query(None, description="Match against name or email"),
    session: AsyncSession = Depends(get_db_session),
):
    """List users, newest first.

    - `page`: Page number (1-indexed, default: 1)
    - `limit`: Items per page (default: 10)
    - `search`: Optional name/email filter
    """
    users, total = await UserService.get_users(session, pagination, search)
    return UserListResponse.create([UserResponse.model_validate(u) for u in users], pagination, total)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get user by ID."""
    user = await UserService.get_user(session, user_id)

    if not user:
        raise UserNotFound()

    return UserResponse.model_validate(user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreateRequest, session: AsyncSession = Depends(get_db_session)):
    """Create a user.

    - **name**: At least 2 characters
    - **email**: Unique email address
    - **role**: `user` (default) or `admin`
    - **password**: Optional, defaults to the configured demo password
    """
    user = await UserService.create_user(session, data)
    await session.commit()
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, data: UserUpdateRequest, session: AsyncSession = Depends(get_db_session)):
    """Update a user's name, email and role."""
    user = await UserService.get_user(session, user_id)

    if not user:
        raise UserNotFound()

    user = await UserService.update_user(session, user, data)
    await session.commit()
    return UserResponse.model_validate(user)


@router.delete("/{user_id}")
async def delete_user(user_id: int, session: AsyncSession = Depends(get_db_session)):
    """Delete a user together with its refresh tokens, posts and files."""
    success = await UserService.delete_user(session, user_id)

    if not success:
        raise UserNotFound()

    await session.commit()
    return {"message": "User deleted successfully"}
