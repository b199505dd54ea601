import os
import uuid
from typing import List

from fastapi import UploadFile
from structlog import get_logger

from app.config import settings
from app.core.errors import ValidationFailure

logger = get_logger()

ALLOWED_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


async def save_images(files: List[UploadFile]) -> List[dict]:
    """
    Validate and write uploaded images to the upload directory.

    Every file is checked before anything is written, so a bad file rejects
    the whole batch. Returns ``{"url", "storageId"}`` records.
    """
    if not files:
        raise ValidationFailure("Please upload an image")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise ValidationFailure(f"You can upload at most {settings.MAX_UPLOAD_FILES} images at a time")

    payloads = []
    for upload in files:
        if not (upload.content_type or "").startswith("image/") or _extension(upload.filename) not in ALLOWED_EXTENSIONS:
            raise ValidationFailure("Please upload an image file")
        # One byte past the limit is enough to spot an oversized file
        content = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise ValidationFailure(f"Image {upload.filename} exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB")
        payloads.append((f"{uuid.uuid4().hex}.{_extension(upload.filename)}", content))

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    images = []
    for storage_id, content in payloads:
        with open(os.path.join(settings.UPLOAD_DIR, storage_id), "wb") as f:
            f.write(content)
        images.append({"url": f"{settings.UPLOAD_URL_PREFIX}/{storage_id}", "storageId": storage_id})
    logger.info("Images stored", count=len(images))
    return images


def delete_image(storage_id: str) -> bool:
    # storage ids are generated file names; refuse anything that could escape the upload dir
    if not storage_id or os.path.basename(storage_id) != storage_id:
        return False
    path = os.path.join(settings.UPLOAD_DIR, storage_id)
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        logger.warning("Image already removed", storage_id=storage_id)
        return False
