from __future__ import annotations

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from core.errors import AppException
from core.settings import get_settings
from core.storage import ImageMetadata, ImageStorageManager, StorageBackend
from core.storage.local_provider import LocalStorageProvider
from services.image_service import store_image


def _upload(payload: bytes, *, content_type: str = "image/png", filename: str = "dish.PNG") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(payload),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def local_storage(tmp_path):
    provider = LocalStorageProvider(root_dir=str(tmp_path), base_url="/media/")
    ImageStorageManager.configure(provider)
    yield provider
    ImageStorageManager.reset()


def test_local_provider_writes_under_owner_folder(local_storage):
    stored = local_storage.put_image(
        metadata=ImageMetadata(owner_id="restro-1", folder="products", file_name="dish.JPG", mime_type="image/jpeg", size=3),
        payload=b"abc",
    )

    assert stored.backend is StorageBackend.LOCAL
    assert stored.object_key.startswith("products/restro-1/")
    assert stored.object_key.endswith(".jpg")
    assert stored.url == f"/media/{stored.object_key}"
    assert (local_storage.root / stored.object_key).read_bytes() == b"abc"

    local_storage.delete_object(object_key=stored.object_key)
    assert not (local_storage.root / stored.object_key).exists()


@pytest.mark.asyncio
async def test_store_image_uses_configured_provider(local_storage):
    stored = await store_image(upload=_upload(b"\x89PNG-data"), owner_id="worker-1", folder="workers")

    assert stored.size == len(b"\x89PNG-data")
    assert stored.mime_type == "image/png"
    assert stored.url.startswith("/media/workers/worker-1/")


@pytest.mark.asyncio
async def test_store_image_rejects_non_image(local_storage):
    with pytest.raises(AppException) as exc_info:
        await store_image(upload=_upload(b"%PDF", content_type="application/pdf"), owner_id="x", folder="products")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["code"] == "IMAGE_UPLOAD_INVALID"


@pytest.mark.asyncio
async def test_store_image_rejects_empty_file(local_storage):
    with pytest.raises(AppException) as exc_info:
        await store_image(upload=_upload(b""), owner_id="x", folder="products")

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_store_image_rejects_oversized_file(monkeypatch: pytest.MonkeyPatch, local_storage):
    monkeypatch.setenv("MAX_IMAGE_SIZE_BYTES", "8")
    get_settings.cache_clear()

    with pytest.raises(AppException) as exc_info:
        await store_image(upload=_upload(b"0123456789"), owner_id="x", folder="products")

    assert exc_info.value.status_code == 413
    assert list(local_storage.root.rglob("*.png")) == []
