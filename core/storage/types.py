from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class StorageBackend(str, Enum):
    LOCAL = "local"
    S3 = "s3"


@dataclass(frozen=True)
class ImageMetadata:
    owner_id: str
    folder: str
    file_name: str
    mime_type: str
    size: int


@dataclass(frozen=True)
class StoredImage:
    object_key: str
    backend: StorageBackend
    url: str
    mime_type: str
    size: int
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
