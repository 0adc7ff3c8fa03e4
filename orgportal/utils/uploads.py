"""Profile and organization picture storage on local disk."""

import logging
import os
import re
import secrets
import time

from fastapi import UploadFile

from orgportal.config.settings import settings
from orgportal.core.errors import ValidationError

logger = logging.getLogger(__name__)

PROFILE = "profile"
ORGANIZATION = "organization"

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def save_picture(upload: UploadFile, subfolder: str) -> str:
    """Store an uploaded image and return its path relative to ``UPLOAD_DIR``."""
    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, GIF and WebP images are allowed.")

    data = upload.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.")
    if not data:
        raise ValidationError("Uploaded file is empty")

    filename = _unique_filename(upload.filename or "upload", upload.content_type)
    directory = os.path.join(settings.UPLOAD_DIR, subfolder)
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, filename), "wb") as fh:
        fh.write(data)

    relative_path = f"{subfolder}/{filename}"
    logger.info("Stored upload %s (%d bytes)", relative_path, len(data))
    return relative_path


def _unique_filename(original: str, content_type: str) -> str:
    # timestamp-random suffix, original stem with whitespace squashed
    stem, ext = os.path.splitext(os.path.basename(original))
    stem = re.sub(r"[^A-Za-z0-9_.-]", "", re.sub(r"\s+", "_", stem)) or "file"
    ext = ext.lower() if ext.lower() in ALLOWED_CONTENT_TYPES.values() else ALLOWED_CONTENT_TYPES[content_type]
    return f"{stem}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
