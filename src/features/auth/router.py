"""Authentication router (JWT token management endpoints)."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session

from .exceptions import InvalidCredentialsException, MissingLoginFieldsException, MissingRefreshTokenException
from .schemas import AuthUser, LoginRequest, LoginResponse, RefreshResponse, RefreshTokenRequest
from .service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
async def login(data: LoginRequest, session: AsyncSession = Depends(get_db_session)):
    """Login and get JWT tokens.

    - **email**: Email address
    - **password**: Password

    Returns the user and a token pair (`accessToken`, `refreshToken`, `expiresIn`).
    """
    if not data.email or not data.password:
        raise MissingLoginFieldsException()

    user = await AuthService.authenticate_user(session, data.email, data.password)

    if not user:
        raise InvalidCredentialsException()

    tokens = await AuthService.create_tokens(session, user)
    await session.commit()

    logger.info(f"User logged in: {user.email}")
    return LoginResponse(user=AuthUser.model_validate(user), tokens=tokens)


@router.post("/refresh", response_model=RefreshResponse, response_model_by_alias=True)
async def refresh_token(data: RefreshTokenRequest, session: AsyncSession = Depends(get_db_session)):
    """Get a new access token.

    - **refreshToken**: Refresh token issued at login
    """
    if not data.refresh_token:
        raise MissingRefreshTokenException()

    return await AuthService.refresh_access_token(session, data.refresh_token)


@router.post("/logout")
async def logout(request: Request, session: AsyncSession = Depends(get_db_session)):
    """Logout by deleting the given refresh token.

    Always succeeds, whatever the body holds.
    """
    try:
        data = RefreshTokenRequest.model_validate_json(await request.body())
    except ValidationError:
        data = None

    if data is not None and data.refresh_token:
        revoked = await AuthService.revoke_refresh_token(session, data.refresh_token)
        await session.commit()
        if revoked:
            logger.info("Refresh token revoked at logout")

    return {"message": "Logged out successfully"}
