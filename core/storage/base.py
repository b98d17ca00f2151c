"""Storage abstraction for S3-compatible object stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class PutResult:
    key: str
    size: int
    status_code: int | None
    etag: str | None = None


class ObjectStorage(Protocol):
    bucket: str

    def put_bytes(self, key: str, data: bytes, content_type: str) -> PutResult:
        """Store ``data`` and return the backend acknowledgement in ``status_code``."""
        ...

    def close(self) -> None:
        ...


__all__ = ["ObjectStorage", "PutResult"]
