from __future__ import annotations

import threading

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from core.exceptions import S3Error
from core.settings import StorageSettings, get_settings
from core.storage.base import PutResult


class S3Storage:
    """S3-compatible storage (Cloudflare R2, MinIO, AWS) addressed by a custom endpoint."""

    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: str,
        access_key_id: str,
        secret_access_key: str,
        region: str = "auto",
    ) -> None:
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        session = boto3.session.Session()
        self.client = session.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "S3Storage":
        credentials = settings.credentials()
        return cls(
            credentials.bucket,
            endpoint_url=credentials.endpoint_url,
            access_key_id=credentials.access_key_id,
            secret_access_key=credentials.secret_access_key,
            region=settings.region,
        )

    def put_bytes(self, key: str, data: bytes, content_type: str) -> PutResult:
        """Write ``data`` under ``key`` and report the backend's acknowledgement.

        The status code is returned as-is; deciding what counts as success is
        left to the caller.
        """
        try:
            response = self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise S3Error(str(exc), {"key": key, "bucket": self.bucket}) from exc

        metadata = response.get("ResponseMetadata", {})
        logger.debug("S3 response metadata for {key}: {metadata}", key=key, metadata=metadata)
        return PutResult(
            key=key,
            size=len(data),
            status_code=metadata.get("HTTPStatusCode"),
            etag=response.get("ETag"),
        )

    def close(self) -> None:
        self.client.close()


_storage_lock = threading.Lock()
_shared_storage: S3Storage | None = None


def get_object_storage() -> S3Storage:
    """Return the process-wide storage client, building it on first use.

    Raises:
        ConfigurationError: if any of the storage environment variables is missing.
    """
    global _shared_storage

    with _storage_lock:
        if _shared_storage is None:
            _shared_storage = S3Storage.from_settings(get_settings().storage)
            logger.info(
                "S3 client initialised for bucket={bucket} endpoint={endpoint}",
                bucket=_shared_storage.bucket,
                endpoint=_shared_storage.endpoint_url,
            )
        return _shared_storage


def close_object_storage() -> None:
    """Release the shared storage client. Errors are logged, never raised."""
    global _shared_storage

    with _storage_lock:
        storage, _shared_storage = _shared_storage, None

    if storage is None:
        return
    try:
        storage.close()
        logger.info("S3 client closed")
    except Exception as exc:
        logger.error("Error during storage cleanup: {error}", error=exc)


__all__ = ["S3Storage", "get_object_storage", "close_object_storage"]
