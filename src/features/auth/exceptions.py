"""Authentication exceptions."""

from fastapi import HTTPException, status

from src.shared.exceptions import BadRequestException


class AuthenticationException(HTTPException):
    """Base authentication exception."""

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class MissingCredentialsException(AuthenticationException):
    """Raised when the Authorization header is absent or not a bearer token."""

    def __init__(self):
        super().__init__(detail="Missing or invalid authorization header")


class InvalidTokenException(AuthenticationException):
    """Raised when the access token fails verification or has expired."""

    def __init__(self):
        super().__init__(detail="Invalid or expired token")


class UnknownUserException(AuthenticationException):
    """Raised when a valid token references a user that no longer exists."""

    def __init__(self):
        super().__init__(detail="User not found")


class InvalidCredentialsException(AuthenticationException):
    """Raised when email or password is incorrect."""

    def __init__(self):
        super().__init__(detail="Invalid credentials")


class InvalidRefreshTokenException(AuthenticationException):
    """Raised when a refresh token is unknown, expired or orphaned."""

    def __init__(self):
        super().__init__(detail="Invalid or expired refresh token")


class MissingLoginFieldsException(BadRequestException):
    """Raised when email or password is missing from the login body."""

    def __init__(self):
        super().__init__(detail="Email and password are required")


class MissingRefreshTokenException(BadRequestException):
    """Raised when the refresh body has no token."""

    def __init__(self):
        super().__init__(detail="Refresh token is required")
