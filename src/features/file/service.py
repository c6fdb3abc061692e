"""File service layer."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.features.user.models import User
from src.shared.exceptions import ValidationFailedException
from src.shared.pagination.pagination import PaginationParams

from .models import FileRecord
from .storage import generate_unique_filename, remove_stored_file, save_upload, validate_file

logger = logging.getLogger(__name__)


class FileService:
    """Service for uploaded file operations."""

    @staticmethod
    async def get_file(session: AsyncSession, file_id: int) -> FileRecord | None:
        """Get file record by ID (uploader loaded)."""
        stmt = select(FileRecord).where(FileRecord.id == file_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_files(session: AsyncSession, pagination: PaginationParams) -> tuple[list[FileRecord], int]:
        """Get paginated file records, newest first."""
        total = (await session.execute(select(func.count()).select_from(FileRecord))).scalar_one()

        stmt = (
            select(FileRecord)
            .order_by(FileRecord.created_at.desc(), FileRecord.id.desc())
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all()), total

    @staticmethod
    async def store_file(
        session: AsyncSession,
        contents: bytes,
        original_name: str,
        mimetype: str | None,
        uploader: User,
    ) -> FileRecord:
        """Validate, write to disk and record an upload.

        Raises:
            ValidationFailedException: Size or type not accepted

        """
        errors = validate_file(len(contents), mimetype)
        if errors:
            raise ValidationFailedException(errors)

        filename = generate_unique_filename(original_name)
        path = await save_upload(contents, filename)

        record = FileRecord(
            filename=filename,
            original_name=original_name,
            mimetype=mimetype,
            size=len(contents),
            uploaded_by=uploader.id,
            file_path=str(path),
        )
        session.add(record)
        try:
            await session.flush()
        except Exception:
            await remove_stored_file(str(path))
            raise
        await session.refresh(record, attribute_names=["uploader"])

        logger.info(f"File uploaded: {original_name} -> {filename} by user {uploader.id}")
        return record

    @staticmethod
    async def delete_file(session: AsyncSession, record: FileRecord) -> None:
        """Delete the record, then the stored bytes (best-effort)."""
        path = record.file_path
        await session.delete(record)
        await session.flush()
        await remove_stored_file(path)
        logger.info(f"File deleted: {record.filename}")

    @staticmethod
    async def count_files(session: AsyncSession) -> int:
        result = await session.execute(select(func.count()).select_from(FileRecord))
        return result.scalar_one()
