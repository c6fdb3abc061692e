"""File schemas (DTOs)."""

from datetime import datetime

from pydantic import BaseModel

from src.features.user.schemas import UserSummary
from src.shared.pagination.pagination import PaginatedResponse


class FileInfoResponse(BaseModel):
    """Stored file metadata with its uploader embedded."""

    id: int
    filename: str
    original_name: str
    mimetype: str
    size: int
    created_at: datetime
    uploader: UserSummary

    model_config = {"from_attributes": True}


FileListResponse = PaginatedResponse[FileInfoResponse]
