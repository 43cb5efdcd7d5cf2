"""Blob store adapter speaking HTTP to the upload service."""

import logging
from urllib.parse import quote

import httpx

from redflag.config import BlobStoreConfig
from redflag.domain.retention.model.value import BlobDeletion
from redflag.domain.retention.port.blob_store import BlobStore
from redflag.domain.shared.error import BlobDeletionFailedError

logger = logging.getLogger(__name__)


class HttpBlobStore(BlobStore):
    """Deletes blobs with `DELETE {base_url}/{storage_id}`.

    2xx means deleted, 404 means the store already lost it. Everything else,
    including transport errors, is a failed deletion.
    """

    def __init__(self, config: BlobStoreConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    async def delete(self, storage_id: str) -> BlobDeletion:
        url = f"{self._config.base_url.rstrip('/')}/{quote(storage_id, safe='')}"
        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        try:
            response = await self._http.delete(url, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Blob store request failed: storage_id=%s: %s", storage_id, e)
            raise BlobDeletionFailedError(storage_id, f"request failed: {e}") from e

        if response.status_code == 404:
            logger.debug("Blob already gone: storage_id=%s", storage_id)
            return BlobDeletion.NOT_FOUND
        if response.is_success:
            return BlobDeletion.DELETED

        logger.error(
            "Blob deletion rejected: storage_id=%s, status=%d, body=%s",
            storage_id,
            response.status_code,
            response.text,
        )
        raise BlobDeletionFailedError(storage_id, f"status {response.status_code}")
