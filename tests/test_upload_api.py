from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from core.storage import get_object_storage
from services.api.main import app

FILE_NAME = "invoice-1001-1700000000000.pdf"


@pytest.fixture()
def storage_override(fake_storage):
    app.dependency_overrides[get_object_storage] = lambda: fake_storage
    yield fake_storage
    app.dependency_overrides.clear()


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio()
async def test_upload_succeeds_with_exact_size(storage_override, pdf_bytes) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            files={"file": (FILE_NAME, pdf_bytes, "application/pdf")},
            data={"fileName": FILE_NAME},
        )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "File uploaded successfully",
        "fileName": FILE_NAME,
        "size": 37,
    }
    assert storage_override.calls == [(FILE_NAME, pdf_bytes, "application/pdf")]


@pytest.mark.asyncio()
async def test_upload_uses_declared_content_type(storage_override) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            files={"file": ("preview.png", b"\x89PNG....", "image/png")},
            data={"fileName": "invoice-draft-1.png"},
        )

    assert response.status_code == 200
    key, _, content_type = storage_override.calls[0]
    assert key == "invoice-draft-1.png"
    assert content_type == "image/png"


@pytest.mark.asyncio()
async def test_missing_file_is_rejected(storage_override) -> None:
    async with _client() as client:
        response = await client.post("/api/upload", data={"fileName": FILE_NAME})

    assert response.status_code == 400
    assert response.json() == {"error": "No file provided"}
    assert storage_override.calls == []


@pytest.mark.asyncio()
async def test_text_value_in_file_field_is_rejected(storage_override) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            data={"file": "not a file", "fileName": FILE_NAME},
        )

    assert response.status_code == 400
    assert response.json() == {"error": "No file provided"}
    assert storage_override.calls == []


@pytest.mark.asyncio()
@pytest.mark.parametrize("form", [{}, {"fileName": ""}])
async def test_missing_or_empty_file_name_is_rejected(storage_override, pdf_bytes, form) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            files={"file": (FILE_NAME, pdf_bytes, "application/pdf")},
            data=form,
        )

    assert response.status_code == 400
    assert response.json() == {"error": "No fileName provided"}
    assert storage_override.calls == []


@pytest.mark.asyncio()
async def test_empty_file_is_rejected(storage_override) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            files={"file": (FILE_NAME, b"", "application/pdf")},
            data={"fileName": FILE_NAME},
        )

    assert response.status_code == 400
    assert response.json() == {"error": "File content is empty"}
    assert storage_override.calls == []


@pytest.mark.asyncio()
async def test_non_200_acknowledgement_is_a_failure(storage_override, pdf_bytes) -> None:
    storage_override.status_code = 204

    async with _client() as client:
        response = await client.post(
            "/api/upload",
            files={"file": (FILE_NAME, pdf_bytes, "application/pdf")},
            data={"fileName": FILE_NAME},
        )

    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == "Error uploading file"
    assert "204" in payload["details"]


@pytest.mark.asyncio()
async def test_unexpected_storage_failure_keeps_upload_label(storage_override, pdf_bytes) -> None:
    storage_override.error = RuntimeError("socket reset")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/upload",
            files={"file": (FILE_NAME, pdf_bytes, "application/pdf")},
            data={"fileName": FILE_NAME},
        )

    assert response.status_code == 500
    assert response.json() == {"error": "Error uploading file", "details": "socket reset"}


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "missing",
    [
        "CLOUDFLARE_R2_ACCESS_KEY_ID",
        "CLOUDFLARE_R2_SECRET_ACCESS_KEY",
        "CLOUDFLARE_R2_BUCKET_NAME",
        "CLOUDFLARE_R2_ENDPOINT",
    ],
)
async def test_missing_configuration_fails_before_validation(monkeypatch, r2_env, missing) -> None:
    monkeypatch.delenv(missing)

    async with _client() as client:
        # Even a request with no file gets the configuration error first
        response = await client.post("/api/upload", data={"fileName": FILE_NAME})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Error uploading file",
        "details": f"Missing required environment variable: {missing}",
    }


@pytest.mark.asyncio()
async def test_metadata_field_is_optional_and_tolerant(storage_override, pdf_bytes) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            files={"file": (FILE_NAME, pdf_bytes, "application/pdf")},
            data={"fileName": FILE_NAME, "metadata": "{not json"},
        )

    assert response.status_code == 200
    assert len(storage_override.calls) == 1


@pytest.mark.asyncio()
async def test_responses_carry_request_id(storage_override) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/upload",
            data={"fileName": FILE_NAME},
            headers={"X-Request-ID": "abc123"},
        )

    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
