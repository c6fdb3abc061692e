"""Authentication service layer."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.features.user.models import User

from .exceptions import InvalidRefreshTokenException
from .jwt_utils import create_access_token, create_refresh_token
from .models import RefreshToken
from .schemas import RefreshResponse, TokenPair

logger = logging.getLogger(__name__)


class AuthService:
    """Service for JWT authentication and refresh token management."""

    @staticmethod
    async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        Args:
            session: Database session
            email: Email address
            password: Plain text password

        Returns:
            User object if authentication successful, None otherwise

        """
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            logger.warning(f"Login attempt for unknown email: {email}")
            return None

        if not user.verify_password(password):
            logger.warning(f"Failed login attempt: {email}")
            return None

        return user

    @staticmethod
    async def create_tokens(session: AsyncSession, user: User) -> TokenPair:
        """Issue an access token and persist a new refresh token for a user."""
        access_token = create_access_token(user.id, user.email, user.role)
        refresh_token_str = create_refresh_token()

        refresh_token = RefreshToken(
            user_id=user.id,
            token=refresh_token_str,
            expires_at=datetime.now(UTC) + timedelta(days=settings.refresh_token_expire_days),
        )
        session.add(refresh_token)
        await session.flush()

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token_str,
            expires_in=settings.access_token_expire_seconds,
        )

    @staticmethod
    async def refresh_access_token(
        session: AsyncSession, refresh_token: str, now: datetime | None = None
    ) -> RefreshResponse:
        """Exchange a stored refresh token for a new access token.

        The refresh token itself is not rotated and stays usable until it
        expires or is deleted.

        Raises:
            InvalidRefreshTokenException: Token unknown, expired, or its user is gone

        """
        now = now or datetime.now(UTC)

        stmt = (
            select(RefreshToken, User)
            .join(User, User.id == RefreshToken.user_id)
            .where(RefreshToken.token == refresh_token, RefreshToken.expires_at > now)
        )
        row = (await session.execute(stmt)).first()

        if row is None:
            raise InvalidRefreshTokenException()

        _, user = row
        return RefreshResponse(
            access_token=create_access_token(user.id, user.email, user.role),
            expires_in=settings.access_token_expire_seconds,
        )

    @staticmethod
    async def revoke_refresh_token(session: AsyncSession, refresh_token: str) -> bool:
        """Delete a refresh token (logout). Returns whether a row was removed."""
        result = await session.execute(delete(RefreshToken).where(RefreshToken.token == refresh_token))
        return result.rowcount > 0
