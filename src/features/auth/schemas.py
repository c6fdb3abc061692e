"""Authentication schemas (DTOs).

Wire format is camelCase (``refreshToken``, ``accessToken``); Python
attributes stay snake_case through an alias generator.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.features.user.models import UserRole


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request schemas
class LoginRequest(BaseModel):
    """Login request.

    Both fields are optional at the schema level so a missing one yields
    the dedicated 400 "Email and password are required" response.
    """

    email: str | None = None
    password: str | None = None


class RefreshTokenRequest(CamelModel):
    """Refresh token request."""

    refresh_token: str | None = None


# Token payload
class TokenPayload(CamelModel):
    """Claims carried by an access token."""

    user_id: int
    email: str
    role: str
    iat: int
    exp: int


# Response schemas
class AuthUser(BaseModel):
    """User block returned at login."""

    id: int
    name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class TokenPair(CamelModel):
    """Access + refresh token pair."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(description="Access token lifetime in seconds")


class LoginResponse(BaseModel):
    """Login response: user identity and issued tokens."""

    user: AuthUser
    tokens: TokenPair


class RefreshResponse(CamelModel):
    """Refresh response: a new access token only, the refresh token is reused."""

    access_token: str
    expires_in: int
