import json

import httpx
import pytest

from docinsight.core.exceptions import StorageError, StorageNotFoundError
from docinsight.services.storage_service import StorageService


def storage_answering(status_code, **response_kwargs):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, **response_kwargs)

    service = StorageService(
        url="https://test.supabase.co/",
        service_role_key="srk",
        transport=httpx.MockTransport(handler),
    )
    return service, requests


@pytest.mark.asyncio
async def test_upload_posts_without_upsert():
    service, requests = storage_answering(200, json={"Key": "documents/a/b.pdf"})

    result = await service.upload_file("documents/a/b.pdf", b"%PDF-1.7")

    assert result == {"Key": "documents/a/b.pdf"}
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://test.supabase.co/storage/v1/object/documents/documents/a/b.pdf"
    assert request.headers["x-upsert"] == "false"
    assert request.headers["Content-Type"] == "application/pdf"
    assert request.headers["apikey"] == "srk"
    assert request.content == b"%PDF-1.7"


@pytest.mark.asyncio
async def test_upload_failure_raises():
    service, _ = storage_answering(409, text="Duplicate")

    with pytest.raises(StorageError, match="Duplicate"):
        await service.upload_file("x.pdf", b"data")


@pytest.mark.asyncio
async def test_download_returns_bytes():
    service, requests = storage_answering(200, content=b"pdf-bytes")

    assert await service.download_file("x.pdf") == b"pdf-bytes"
    assert requests[0].method == "GET"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code,body",
    [(404, "missing"), (400, '{"error": "not_found", "message": "Object not found"}')],
)
async def test_download_missing_object(status_code, body):
    service, _ = storage_answering(status_code, text=body)

    with pytest.raises(StorageNotFoundError):
        await service.download_file("gone.pdf")


@pytest.mark.asyncio
async def test_download_server_error():
    service, _ = storage_answering(500, text="internal")

    with pytest.raises(StorageError) as exc_info:
        await service.download_file("x.pdf")

    assert not isinstance(exc_info.value, StorageNotFoundError)


@pytest.mark.asyncio
async def test_remove_sends_prefixes():
    service, requests = storage_answering(200, json=[])

    await service.remove_files(["documents/a/b.pdf"])

    request = requests[0]
    assert request.method == "DELETE"
    assert str(request.url) == "https://test.supabase.co/storage/v1/object/documents"
    assert json.loads(request.content) == {"prefixes": ["documents/a/b.pdf"]}
