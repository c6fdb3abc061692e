"""User service layer (credential store)."""

import logging
from datetime import UTC, datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.features.auth.models import RefreshToken
from src.features.file.models import FileRecord
from src.features.file.storage import remove_stored_file
from src.features.post.models import Post
from src.shared.pagination.pagination import PaginationParams

from .exceptions import EmailAlreadyExists
from .models import User, UserRole
from .schemas import UserCreateRequest, UserUpdateRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    @staticmethod
    async def get_user(session: AsyncSession, user_id: int) -> User | None:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
        """Get user by email address."""
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_users(
        session: AsyncSession, pagination: PaginationParams, search: str | None = None
    ) -> tuple[list[User], int]:
        """Get paginated users list, newest first.

        Args:
            session: Database session
            pagination: PaginationParams with page and limit
            search: Optional substring matched against name and email

        Returns:
            Tuple of (users, total_count)

        """
        condition = None
        if search:
            pattern = f"%{search}%"
            condition = or_(User.name.ilike(pattern), User.email.ilike(pattern))

        count_stmt = select(func.count()).select_from(User)
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        if condition is not None:
            count_stmt = count_stmt.where(condition)
            stmt = stmt.where(condition)

        total = (await session.execute(count_stmt)).scalar_one()

        stmt = stmt.offset(pagination.skip).limit(pagination.limit)
        result = await session.execute(stmt)
        users = list(result.scalars().all())

        return users, total

    @staticmethod
    async def create_user(session: AsyncSession, data: UserCreateRequest) -> User:
        """Create a new user.

        Raises:
            EmailAlreadyExists: If email already exists

        """
        if await UserService.get_user_by_email(session, data.email):
            raise EmailAlreadyExists()

        user = User(
            name=data.name,
            email=data.email,
            role=(data.role or UserRole.USER).value,
            hashed_password=User.hash_password(data.password or settings.default_user_password),
        )

        session.add(user)
        await session.flush()
        await session.refresh(user)
        logger.info(f"New user created: {user.email} ({user.role})")

        return user

    @staticmethod
    async def update_user(session: AsyncSession, user: User, data: UserUpdateRequest) -> User:
        """Update name, email and (optionally) role.

        Raises:
            EmailAlreadyExists: If email is being changed to an existing email

        """
        if data.email != user.email:
            existing = await UserService.get_user_by_email(session, data.email)
            if existing and existing.id != user.id:
                raise EmailAlreadyExists()

        user.name = data.name
        user.email = data.email
        if data.role is not None:
            user.role = data.role.value
        if data.password:
            user.hashed_password = User.hash_password(data.password)
        user.updated_at = datetime.now(UTC)

        await session.flush()
        await session.refresh(user)
        logger.info(f"User updated: {user.email}")
        return user

    @staticmethod
    async def delete_user(session: AsyncSession, user_id: int) -> bool:
        """Delete a user and everything that references it.

        Refresh tokens, posts and file records go first, then the user row,
        all in the caller's transaction so a failure leaves nothing half-deleted.
        """
        user = await UserService.get_user(session, user_id)
        if user is None:
            return False

        file_paths = (
            await session.execute(select(FileRecord.file_path).where(FileRecord.uploaded_by == user_id))
        ).scalars().all()

        await session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        await session.execute(delete(Post).where(Post.author_id == user_id))
        await session.execute(delete(FileRecord).where(FileRecord.uploaded_by == user_id))
        await session.delete(user)
        await session.flush()

        for path in file_paths:
            await remove_stored_file(path)

        logger.info(f"User deleted: {user.email} (id={user_id})")
        return True

    @staticmethod
    async def count_users(session: AsyncSession) -> int:
        result = await session.execute(select(func.count()).select_from(User))
        return result.scalar_one()
