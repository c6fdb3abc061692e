"""Authentication dependencies for FastAPI."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.user.models import User
from src.features.user.service import UserService

from .exceptions import InvalidTokenException, MissingCredentialsException, UnknownUserException
from .jwt_utils import decode_access_token

# auto_error=False so a missing header maps onto our own 401 body
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP authorization credentials with bearer token
        session: Database session

    Returns:
        User object

    Raises:
        MissingCredentialsException: No ``Authorization: Bearer`` header
        InvalidTokenException: Token fails verification or has expired
        UnknownUserException: Token is valid but the user was deleted

    """
    if credentials is None or not credentials.credentials:
        raise MissingCredentialsException()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise InvalidTokenException()

    user = await UserService.get_user(session, payload.user_id)
    if user is None:
        raise UnknownUserException()

    return user
