from __future__ import annotations

from core.storage.provider import ImageStorageProvider, build_object_key
from core.storage.types import ImageMetadata, StorageBackend, StoredImage


class S3StorageProvider(ImageStorageProvider):
    backend_name = StorageBackend.S3.value

    def __init__(
        self,
        *,
        bucket_name: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
    ) -> None:
        try:
            import boto3
        except ModuleNotFoundError as err:
            raise RuntimeError("boto3 is required for S3 storage provider") from err

        self._bucket = bucket_name
        self._client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
        if public_base_url:
            self._base_url = public_base_url.rstrip("/")
        elif endpoint_url:
            self._base_url = f"{endpoint_url.rstrip('/')}/{bucket_name}"
        else:
            self._base_url = f"https://{bucket_name}.s3.{region or 'us-east-1'}.amazonaws.com"

    def put_image(self, *, metadata: ImageMetadata, payload: bytes) -> StoredImage:
        object_key = build_object_key(metadata)
        self._client.put_object(
            Bucket=self._bucket,
            Key=object_key,
            Body=payload,
            ContentType=metadata.mime_type,
        )
        return StoredImage(
            object_key=object_key,
            backend=StorageBackend.S3,
            url=self.public_url(object_key=object_key),
            mime_type=metadata.mime_type,
            size=len(payload),
        )

    def public_url(self, *, object_key: str) -> str:
        return f"{self._base_url}/{object_key}"

    def delete_object(self, *, object_key: str) -> None:
        self._client.delete_object(Bucket=self._bucket, Key=object_key)
