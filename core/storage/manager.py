from __future__ import annotations

import logging
from threading import Lock
from typing import Callable

from core.settings import Settings, get_settings
from core.storage.local_provider import LocalStorageProvider
from core.storage.provider import ImageStorageProvider
from core.storage.s3_provider import S3StorageProvider
from core.storage.types import StorageBackend

logger = logging.getLogger(__name__)


def _local_provider(settings: Settings) -> ImageStorageProvider:
    return LocalStorageProvider(root_dir=settings.storage_local_root, base_url=settings.media_base_url)


def _s3_provider(settings: Settings) -> ImageStorageProvider:
    if not settings.s3_bucket_name:
        raise RuntimeError("S3_BUCKET_NAME is required when STORAGE_BACKEND=s3")
    # relative media URLs point at the app's own static mount
    public_base_url = settings.media_base_url if settings.media_base_url.startswith("http") else None
    return S3StorageProvider(
        bucket_name=settings.s3_bucket_name,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        public_base_url=public_base_url,
    )


PROVIDER_FACTORIES: dict[StorageBackend, Callable[[Settings], ImageStorageProvider]] = {
    StorageBackend.LOCAL: _local_provider,
    StorageBackend.S3: _s3_provider,
}


class ImageStorageManager:
    """Process-wide holder of the image storage provider used for avatars and product images."""

    _instance: "ImageStorageManager | None" = None
    _lock = Lock()

    def __init__(self, provider: ImageStorageProvider) -> None:
        self._provider = provider

    @classmethod
    def configure(cls, provider: ImageStorageProvider) -> "ImageStorageManager":
        with cls._lock:
            cls._instance = cls(provider)
        logger.info("image storage configured backend=%s", provider.backend_name)
        return cls._instance

    @classmethod
    def configure_from_settings(cls) -> "ImageStorageManager":
        settings = get_settings()
        factory = PROVIDER_FACTORIES[StorageBackend(settings.storage_backend)]
        return cls.configure(factory(settings))

    @classmethod
    def get_instance(cls) -> "ImageStorageManager":
        instance = cls._instance
        if instance is None:
            return cls.configure_from_settings()
        return instance

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._instance = None

    @property
    def provider(self) -> ImageStorageProvider:
        return self._provider
