"""
Event image uploads.

Files are written to UPLOAD_DIR under a random name and served by the
StaticFiles mount at /uploads. The returned path is what admins store in
an event's `image` field.
"""

import uuid
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from eventy.core.config import get_settings
from eventy.core.exceptions import ValidationError
from eventy.core.metrics import record_upload
from eventy.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

UPLOAD_URL_PREFIX = "/uploads"

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _reject(reason: str) -> ValidationError:
    record_upload(stored=False)
    logger.warning("upload_rejected", reason=reason)
    return ValidationError(reason, errors=[{"field": "file", "message": reason}])


async def save_image(file: UploadFile) -> str:
    """Store an uploaded image and return its public path."""
    suffix = ALLOWED_IMAGE_TYPES.get(file.content_type or "")
    if suffix is None:
        raise _reject(f"Unsupported image type: {file.content_type}. Allowed: {', '.join(ALLOWED_IMAGE_TYPES)}")

    # Read one byte past the limit to detect oversize files without loading them whole
    data = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if not data:
        raise _reject("Uploaded file is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise _reject(f"Image exceeds the {settings.MAX_UPLOAD_BYTES} byte limit")

    filename = f"{uuid.uuid4().hex}{suffix}"
    target = upload_dir() / filename
    await run_in_threadpool(target.write_bytes, data)

    record_upload(stored=True)
    logger.info("image_uploaded", filename=filename, original=file.filename, size=len(data))
    return f"{UPLOAD_URL_PREFIX}/{filename}"
