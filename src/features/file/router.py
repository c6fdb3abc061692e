"""File router (upload, listing, download)."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.auth.dependencies import get_current_user
from src.features.realtime.hub import ChannelHub, get_hub
from src.features.user.models import User
from src.shared.exceptions import ValidationFailedException
from src.shared.pagination.pagination import PaginationParams

from .exceptions import FileMissingOnDisk, FileNotFound, NoFileProvided
from .schemas import FileInfoResponse, FileListResponse
from .service import FileService
from .storage import validate_file

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/upload", response_model=FileInfoResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile | None = File(None, description="File to upload"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    hub: ChannelHub = Depends(get_hub),
):
    """Upload a file (requires auth, multipart field `file`).

    Images, PDF, JSON, CSV, Excel and plain text up to 10MB are accepted.
    """
    if file is None or not file.filename:
        raise NoFileProvided()

    # The multipart part is already spooled; reject on its size before buffering
    if file.size is not None:
        errors = validate_file(file.size, file.content_type)
        if errors:
            raise ValidationFailedException(errors)

    contents = await file.read(settings.max_upload_size + 1)
    record = await FileService.store_file(session, contents, file.filename, file.content_type, current_user)
    await session.commit()

    response = FileInfoResponse.model_validate(record)
    await hub.notify_user(
        current_user.id,
        {"type": "file_uploaded", "file": response.model_dump(mode="json")},
    )
    return response


@router.get("", response_model=FileListResponse)
async def list_files(pagination: PaginationParams = Depends(), session: AsyncSession = Depends(get_db_session)):
    """List uploaded files, newest first."""
    files, total = await FileService.get_files(session, pagination)
    return FileListResponse.create([FileInfoResponse.model_validate(f) for f in files], pagination, total)


@router.get("/{file_id}", response_model=FileInfoResponse)
async def get_file(file_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get file metadata by ID."""
    record = await FileService.get_file(session, file_id)

    if not record:
        raise FileNotFound()

    return FileInfoResponse.model_validate(record)


@router.get("/{file_id}/download", response_class=FileResponse)
async def download_file(file_id: int, session: AsyncSession = Depends(get_db_session)):
    """Download a stored file as an attachment under its original name."""
    record = await FileService.get_file(session, file_id)

    if not record:
        raise FileNotFound()

    if not Path(record.file_path).is_file():
        raise FileMissingOnDisk()

    return FileResponse(record.file_path, media_type=record.mimetype, filename=record.original_name)


@router.delete("/{file_id}")
async def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a file record and its stored bytes (requires auth)."""
    record = await FileService.get_file(session, file_id)

    if not record:
        raise FileNotFound()

    await FileService.delete_file(session, record)
    await session.commit()
    return {"message": "File deleted successfully"}
