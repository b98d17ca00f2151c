from __future__ import annotations

import pytest
from botocore.stub import Stubber

from core.exceptions import ConfigurationError, S3Error
from core.storage import S3Storage, close_object_storage, get_object_storage


def _storage() -> S3Storage:
    return S3Storage(
        "invoices",
        endpoint_url="https://account.r2.cloudflarestorage.com",
        access_key_id="key",
        secret_access_key="secret",
    )


def test_put_bytes_reports_backend_status(pdf_bytes):
    storage = _storage()
    with Stubber(storage.client) as stubber:
        stubber.add_response(
            "put_object",
            {"ETag": '"abc"', "ResponseMetadata": {"HTTPStatusCode": 200}},
            {
                "Bucket": "invoices",
                "Key": "invoice-1001.pdf",
                "Body": pdf_bytes,
                "ContentType": "application/pdf",
            },
        )
        result = storage.put_bytes("invoice-1001.pdf", pdf_bytes, "application/pdf")
        stubber.assert_no_pending_responses()

    assert result.key == "invoice-1001.pdf"
    assert result.size == 37
    assert result.status_code == 200
    assert result.etag == '"abc"'


def test_put_bytes_passes_through_other_statuses(pdf_bytes):
    storage = _storage()
    with Stubber(storage.client) as stubber:
        stubber.add_response("put_object", {"ResponseMetadata": {"HTTPStatusCode": 204}})
        result = storage.put_bytes("a.pdf", pdf_bytes, "application/pdf")

    assert result.status_code == 204


def test_put_bytes_wraps_client_errors(pdf_bytes):
    storage = _storage()
    with Stubber(storage.client) as stubber:
        stubber.add_client_error(
            "put_object",
            service_error_code="AccessDenied",
            service_message="Access Denied",
            http_status_code=403,
        )
        with pytest.raises(S3Error) as excinfo:
            storage.put_bytes("a.pdf", pdf_bytes, "application/pdf")

    assert "AccessDenied" in excinfo.value.message
    assert excinfo.value.details["key"] == "a.pdf"


def test_shared_storage_is_built_once(r2_env):
    first = get_object_storage()
    second = get_object_storage()

    assert first is second
    assert first.bucket == "invoices"
    assert first.client.meta.region_name == "auto"
    assert first.endpoint_url == r2_env["CLOUDFLARE_R2_ENDPOINT"]


def test_close_releases_shared_storage(r2_env):
    first = get_object_storage()
    close_object_storage()

    assert get_object_storage() is not first


def test_close_swallows_cleanup_errors(r2_env, monkeypatch):
    storage = get_object_storage()

    def _boom() -> None:
        raise RuntimeError("socket already gone")

    monkeypatch.setattr(storage, "close", _boom)

    close_object_storage()
    close_object_storage()


def test_missing_configuration_prevents_client(no_r2_env):
    with pytest.raises(ConfigurationError) as excinfo:
        get_object_storage()

    assert excinfo.value.details == {"variable": "CLOUDFLARE_R2_ACCESS_KEY_ID"}
