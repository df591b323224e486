from core.storage.manager import ImageStorageManager
from core.storage.types import ImageMetadata, StorageBackend, StoredImage

__all__ = [
    "ImageMetadata",
    "ImageStorageManager",
    "StorageBackend",
    "StoredImage",
]
