"""Object storage backends."""

from core.storage.base import ObjectStorage, PutResult
from core.storage.s3 import S3Storage, close_object_storage, get_object_storage

__all__ = [
    "ObjectStorage",
    "PutResult",
    "S3Storage",
    "get_object_storage",
    "close_object_storage",
]
