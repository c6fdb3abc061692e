"""On-disk storage for uploaded files."""

import logging
import secrets
import time
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from src.config.settings import settings

logger = logging.getLogger(__name__)

ALLOWED_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "text/plain",
        "application/pdf",
        "application/json",
        "text/csv",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)


def generate_unique_filename(original_name: str) -> str:
    """Build a ``{millis}_{random}.{ext}`` name keeping the original extension."""
    stem = f"{int(time.time() * 1000)}_{secrets.token_hex(3)}"
    extension = Path(original_name).suffix.lstrip(".")
    return f"{stem}.{extension}" if extension else stem


def validate_file(size: int, mimetype: str | None) -> list[str]:
    """Return the list of problems with an upload (empty when acceptable)."""
    errors = []
    if size > settings.max_upload_size:
        errors.append(f"File size must be less than {settings.max_upload_size // (1024 * 1024)}MB")
    if mimetype not in ALLOWED_TYPES:
        errors.append("File type not supported. Allowed types: images, PDF, JSON, CSV, Excel")
    return errors


def _write(destination: Path, contents: bytes) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(contents)


async def save_upload(contents: bytes, filename: str) -> Path:
    """Persist ``contents`` under the upload directory and return the path."""
    destination = Path(settings.upload_dir) / filename
    await run_in_threadpool(_write, destination, contents)
    return destination


async def remove_stored_file(path: str) -> bool:
    """Delete a stored file. Failures are logged, never raised."""
    try:
        await run_in_threadpool(Path(path).unlink)
    except FileNotFoundError:
        logger.warning(f"Stored file already missing: {path}")
        return False
    except OSError as exc:
        logger.error(f"Failed to delete stored file {path}: {exc}")
        return False
    return True
