from __future__ import annotations

import logging

from fastapi import UploadFile, status
from starlette.concurrency import run_in_threadpool

from core.errors import image_upload_invalid
from core.settings import get_settings
from core.storage import ImageMetadata, ImageStorageManager, StoredImage

logger = logging.getLogger(__name__)


async def store_image(*, upload: UploadFile, owner_id: str, folder: str) -> StoredImage:
    """Validate an uploaded image and hand it to the configured storage provider.

    Raises:
        AppException 400: not an image, or empty
        AppException 413: larger than MAX_IMAGE_SIZE_BYTES
    """
    content_type = (upload.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise image_upload_invalid("Only image uploads are accepted")

    max_size = get_settings().max_image_size_bytes
    payload = await upload.read(max_size + 1)
    if not payload:
        raise image_upload_invalid("Uploaded image is empty")
    if len(payload) > max_size:
        raise image_upload_invalid(
            f"Image exceeds the maximum size of {max_size} bytes",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )

    metadata = ImageMetadata(
        owner_id=owner_id,
        folder=folder,
        file_name=upload.filename or "upload",
        mime_type=content_type,
        size=len(payload),
    )
    provider = ImageStorageManager.get_instance().provider
    stored = await run_in_threadpool(provider.put_image, metadata=metadata, payload=payload)
    logger.info("image stored backend=%s key=%s", stored.backend.value, stored.object_key)
    return stored
