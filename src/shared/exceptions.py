"""Shared API exceptions.

Every expected failure is an HTTPException subclass; the handlers in
error_handlers.py render them as ``{"error": detail}`` bodies.
"""

from fastapi import HTTPException, status


class BadRequestException(HTTPException):
    """Raised for malformed or incomplete input."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationFailedException(BadRequestException):
    """Raised when input fails validation; carries human-readable messages."""

    def __init__(self, errors: list[str]):
        super().__init__(detail="Validation failed")
        self.errors = errors


class NotFoundException(HTTPException):
    """Raised when a requested resource does not exist."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictException(HTTPException):
    """Raised when a write would violate a uniqueness constraint."""

    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class RateLimitExceededException(HTTPException):
    """Raised when a client exceeds its request budget."""

    def __init__(self):
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")
