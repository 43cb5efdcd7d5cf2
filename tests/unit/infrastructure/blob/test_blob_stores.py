"""Unit tests for blob store adapters."""

import httpx
import pytest

from redflag.config import BlobStoreConfig
from redflag.domain.retention.model.value import BlobDeletion
from redflag.domain.shared.error import BlobDeletionFailedError
from redflag.infrastructure.blob.http import HttpBlobStore
from redflag.infrastructure.blob.local import LocalBlobStore


def _make_http_store(handler) -> HttpBlobStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = BlobStoreConfig(backend="http", base_url="https://blobs.example/files/", api_key="k")
    return HttpBlobStore(config=config, http_client=client)


class TestHttpBlobStore:
    @pytest.mark.asyncio
    async def test_success_is_deleted(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        outcome = await _make_http_store(handler).delete("abc 1")

        assert outcome is BlobDeletion.DELETED
        assert seen[0].method == "DELETE"
        assert seen[0].url.raw_path == b"/files/abc%201"
        assert seen[0].headers["Authorization"] == "Bearer k"

    @pytest.mark.asyncio
    async def test_404_is_not_found(self) -> None:
        store = _make_http_store(lambda request: httpx.Response(404))

        assert await store.delete("abc") is BlobDeletion.NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 500, 503])
    async def test_other_status_fails(self, status: int) -> None:
        store = _make_http_store(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(BlobDeletionFailedError) as exc:
            await store.delete("abc")
        assert exc.value.storage_id == "abc"
        assert str(status) in exc.value.reason

    @pytest.mark.asyncio
    async def test_transport_error_fails(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BlobDeletionFailedError):
            await _make_http_store(handler).delete("abc")


class TestLocalBlobStore:
    @pytest.mark.asyncio
    async def test_existing_file_is_deleted(self, tmp_path) -> None:
        store = LocalBlobStore(base_path=str(tmp_path))
        (tmp_path / "abc").write_bytes(b"data")

        assert await store.delete("abc") is BlobDeletion.DELETED
        assert not (tmp_path / "abc").exists()

    @pytest.mark.asyncio
    async def test_missing_file_is_not_found(self, tmp_path) -> None:
        store = LocalBlobStore(base_path=str(tmp_path))

        assert await store.delete("abc") is BlobDeletion.NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize("storage_id", ["../etc/passwd", "a/b", ""])
    async def test_path_traversal_is_refused(self, tmp_path, storage_id: str) -> None:
        store = LocalBlobStore(base_path=str(tmp_path))

        with pytest.raises(BlobDeletionFailedError):
            await store.delete(storage_id)


class TestHttpBlobStoreMisconfiguration:
    @pytest.mark.asyncio
    async def test_invalid_url_is_a_failed_deletion(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.InvalidURL("bad base_url")

        with pytest.raises(BlobDeletionFailedError) as exc:
            await _make_http_store(handler).delete("abc")
        assert "bad base_url" in exc.value.reason
