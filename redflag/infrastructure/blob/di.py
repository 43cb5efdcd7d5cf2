"""DI provider for the blob store adapter."""

from typing import AsyncIterable

import httpx
from dishka import provide

from redflag.config import Config
from redflag.domain.retention.port.blob_store import BlobStore
from redflag.domain.shared.error import ConfigurationError
from redflag.infrastructure.blob.http import HttpBlobStore
from redflag.infrastructure.blob.local import LocalBlobStore
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class BlobStoreProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for blob store calls (connection pooling)."""
        async with httpx.AsyncClient(timeout=config.blob_store.timeout) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_blob_store(self, config: Config, http_client: httpx.AsyncClient) -> BlobStore:
        if config.blob_store.backend == "http":
            if not config.blob_store.base_url:
                raise ConfigurationError("blob_store.base_url is required for the http backend")
            return HttpBlobStore(config=config.blob_store, http_client=http_client)
        return LocalBlobStore(base_path=config.blob_store.local_path)
