"""File-related exceptions."""

from src.shared.exceptions import BadRequestException, NotFoundException


class FileNotFound(NotFoundException):
    """Raised when a file record does not exist."""

    def __init__(self):
        super().__init__(detail="File not found")


class FileMissingOnDisk(NotFoundException):
    """Raised when the record exists but the stored bytes are gone."""

    def __init__(self):
        super().__init__(detail="File not found on disk")


class NoFileProvided(BadRequestException):
    """Raised when the upload form has no ``file`` field."""

    def __init__(self):
        super().__init__(detail="No file provided")
