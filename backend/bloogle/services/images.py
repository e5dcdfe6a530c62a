"""
Image store: raw bytes + mimetype in, Image row out.

Identical payloads (same sha256) are stored once; uploading the same bytes
again returns the existing row.
"""
import logging
from typing import Optional

from fastapi import UploadFile
from tortoise.exceptions import IntegrityError

from bloogle.config import settings
from bloogle.core.security import sha256_hex
from bloogle.models.image import Image

logger = logging.getLogger("uvicorn.error")


class InvalidUpload(ValueError):
    """Uploaded file is not an acceptable image"""


async def store_image(name: str, mimetype: str, data: bytes) -> Image:
    digest = sha256_hex(data)
    existing = await Image.get_or_none(data_hash=digest)
    if existing:
        return existing
    try:
        return await Image.create(name=name, mimetype=mimetype, data=data, data_hash=digest)
    except IntegrityError:
        # Same bytes were stored by a concurrent upload
        return await Image.get(data_hash=digest)


async def image_from_upload(upload: Optional[UploadFile]) -> Optional[Image]:
    """
    Store an optional multipart upload.

    Returns:
    - Image, or None when no file was chosen

    Raises:
    - InvalidUpload: not an image, empty, or larger than MAX_UPLOAD_BYTES
    """
    if upload is None or not upload.filename:
        return None
    mimetype = upload.content_type or ""
    if not mimetype.startswith("image/"):
        raise InvalidUpload("only image files are accepted")
    data = await upload.read(settings.max_upload_bytes + 1)
    await upload.close()
    if not data:
        raise InvalidUpload("uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise InvalidUpload("uploaded file is too large")
    image = await store_image(upload.filename[:255], mimetype, data)
    logger.info("[images] stored %s (%d bytes) as id=%s", mimetype, len(data), image.id)
    return image
