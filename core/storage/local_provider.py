from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from core.storage.provider import ImageStorageProvider, build_object_key
from core.storage.types import ImageMetadata, StorageBackend, StoredImage


class LocalStorageProvider(ImageStorageProvider):
    """Writes images under ``root_dir``; ``main`` serves that directory at the media base URL."""

    backend_name = StorageBackend.LOCAL.value

    def __init__(self, root_dir: str, base_url: str = "/media") -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def put_image(self, *, metadata: ImageMetadata, payload: bytes) -> StoredImage:
        object_key = build_object_key(metadata)
        file_path = self._root / object_key
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(payload)
        return StoredImage(
            object_key=object_key,
            backend=StorageBackend.LOCAL,
            url=self.public_url(object_key=object_key),
            mime_type=metadata.mime_type,
            size=file_path.stat().st_size,
        )

    def public_url(self, *, object_key: str) -> str:
        return f"{self._base_url}/{quote(object_key)}"

    def delete_object(self, *, object_key: str) -> None:
        file_path = self._root / object_key
        if file_path.exists():
            file_path.unlink()
