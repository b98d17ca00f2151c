from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from core.settings import get_settings
from core.storage import PutResult, close_object_storage

R2_ENV = {
    "CLOUDFLARE_R2_ACCESS_KEY_ID": "test-access-key",
    "CLOUDFLARE_R2_SECRET_ACCESS_KEY": "test-secret-key",
    "CLOUDFLARE_R2_BUCKET_NAME": "invoices",
    "CLOUDFLARE_R2_ENDPOINT": "https://account.r2.cloudflarestorage.com",
}


@dataclass
class FakeStorage:
    """Records put calls and acknowledges with a fixed status."""

    bucket: str = "invoices"
    status_code: int | None = 200
    calls: list[tuple[str, bytes, str]] = field(default_factory=list)
    closed: bool = False
    error: Exception | None = None

    def put_bytes(self, key: str, data: bytes, content_type: str) -> PutResult:
        self.calls.append((key, data, content_type))
        if self.error is not None:
            raise self.error
        return PutResult(key=key, size=len(data), status_code=self.status_code, etag='"etag"')

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolated_storage():
    get_settings.cache_clear()
    close_object_storage()
    yield
    close_object_storage()
    get_settings.cache_clear()


@pytest.fixture()
def r2_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for name, value in R2_ENV.items():
        monkeypatch.setenv(name, value)
    return dict(R2_ENV)


@pytest.fixture()
def no_r2_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in R2_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def pdf_bytes() -> bytes:
    """37 bytes that start like a PDF."""
    data = b"%PDF-1.4\n" + b"x" * 28
    assert len(data) == 37
    return data
