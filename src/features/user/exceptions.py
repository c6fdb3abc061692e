"""User-related exceptions."""

from src.shared.exceptions import ConflictException, NotFoundException


class UserNotFound(NotFoundException):
    """Raised when user is not found."""

    def __init__(self):
        super().__init__(detail="User not found")


class EmailAlreadyExists(ConflictException):
    """Raised when email already exists."""

    def __init__(self):
        super().__init__(detail="Email already exists")
