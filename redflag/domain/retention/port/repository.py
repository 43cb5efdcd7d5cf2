"""Repository port for uploaded resources."""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from redflag.domain.conversation.model.conversation import ConversationId
from redflag.domain.retention.model.resource import UploadedResource, UploadedResourceId
from redflag.domain.shared.port import Port


class UploadedResourceRepository(Port, Protocol):
    @abstractmethod
    async def get(
        self, resource_id: UploadedResourceId, include_deleted: bool = False
    ) -> UploadedResource | None: ...

    @abstractmethod
    async def save(self, resource: UploadedResource) -> None: ...

    @abstractmethod
    async def list_for_conversation(
        self, conversation_id: ConversationId, include_deleted: bool = False
    ) -> list[UploadedResource]: ...

    @abstractmethod
    async def list_expired(
        self,
        now: datetime,
        limit: int,
        after: tuple[datetime, UploadedResourceId] | None = None,
    ) -> list[UploadedResource]:
        """Rows with auto_delete_at <= now and deleted_at null.

        Ordered by (auto_delete_at, id); `after` resumes strictly past that key.
        """
        ...

    @abstractmethod
    async def mark_deleted(self, resource_id: UploadedResourceId, at: datetime) -> bool:
        """Set deleted_at if still null. Returns False if the row was already marked."""
        ...
