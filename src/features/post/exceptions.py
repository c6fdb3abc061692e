"""Post-related exceptions."""

from src.shared.exceptions import NotFoundException, ValidationFailedException


class PostNotFound(NotFoundException):
    """Raised when post is not found."""

    def __init__(self):
        super().__init__(detail="Post not found")


class InvalidPostAuthor(ValidationFailedException):
    """Raised when author_id does not reference an existing user."""

    def __init__(self):
        super().__init__(errors=["Valid author_id is required"])
