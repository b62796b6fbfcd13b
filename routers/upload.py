import uuid
from fastapi import UploadFile
from pathlib import Path
import shutil
import logging
from typing import List

from core.config import settings
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Constants
PRODUCT_IMAGES_FOLDER = "product_images"
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

def validate_image_file(file: UploadFile) -> None:
    """Validate uploaded image file"""
    if file.size and file.size > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(
            f"File size too large. Maximum size allowed is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
            field=file.filename
        )

    if file.filename:
        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
                field=file.filename
            )

    if file.content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            f"Invalid content type. Allowed types: {', '.join(sorted(ALLOWED_MIME_TYPES))}",
            field=file.filename
        )

def save_image(file: UploadFile, folder: str = PRODUCT_IMAGES_FOLDER) -> str:
    """Store an uploaded image as an opaque blob and return its public URL"""
    validate_image_file(file)

    target_dir = Path(settings.UPLOAD_DIR) / folder
    target_dir.mkdir(parents=True, exist_ok=True)

    file_ext = Path(file.filename).suffix.lower() if file.filename else ".jpg"
    filename = f"{uuid.uuid4().hex}{file_ext}"
    with open(target_dir / filename, "wb") as buffer:
        shutil.copyfileobj(file.file, buffer)

    logger.info(f"Stored upload {file.filename} as {folder}/{filename}")
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{folder}/{filename}"

def discard_images(urls: List[str]) -> None:
    """Remove files stored by ``save_image`` when the write they belonged to failed"""
    prefix = f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/"
    for url in urls:
        if not url.startswith(prefix):
            continue
        path = Path(settings.UPLOAD_DIR) / url[len(prefix):]
        if path.is_file():
            path.unlink()
            logger.info(f"Discarded upload {url}")
