from __future__ import annotations

from pathlib import Path
from typing import Protocol
from uuid import uuid4

from core.storage.types import ImageMetadata, StoredImage


def build_object_key(metadata: ImageMetadata) -> str:
    extension = Path(metadata.file_name).suffix.lower()
    return f"{metadata.folder}/{metadata.owner_id}/{uuid4().hex}{extension}"


class ImageStorageProvider(Protocol):
    backend_name: str

    def put_image(self, *, metadata: ImageMetadata, payload: bytes) -> StoredImage:
        ...

    def public_url(self, *, object_key: str) -> str:
        ...

    def delete_object(self, *, object_key: str) -> None:
        ...
