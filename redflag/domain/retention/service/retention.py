"""Retention service: upload registration and expiry sweeps."""

import logging
from datetime import UTC, datetime

from redflag.domain.auth.model.value import UserId
from redflag.domain.conversation.model.conversation import ConversationId
from redflag.domain.conversation.port.repository import ConversationRepository
from redflag.domain.retention.model.resource import UploadedResource, UploadedResourceId
from redflag.domain.retention.model.value import BlobDeletion, SweepFailure, SweepReport
from redflag.domain.retention.port.blob_store import BlobStore
from redflag.domain.retention.port.repository import UploadedResourceRepository
from redflag.domain.shared.error import BlobDeletionFailedError, NotFoundError, ValidationError
from redflag.domain.shared.service import Service
from redflag.domain.shared.uow import UnitOfWork

logger = logging.getLogger(__name__)


class RetentionService(Service):
    """Tracks uploaded files and removes them once their retention window elapses.

    Sweeps delete the blob first and only then mark the row, committing one
    row at a time. A failed blob delete leaves the row untouched for the next
    sweep, so an aborted run loses nothing and a repeated run is a no-op.
    """

    _repo: UploadedResourceRepository
    _conversations: ConversationRepository
    _blob_store: BlobStore
    _uow: UnitOfWork
    _retention_days: int
    _batch_size: int = 100

    async def register_upload(
        self,
        user_id: UserId,
        conversation_id: ConversationId,
        storage_url: str,
        storage_id: str,
        file_type: str,
        size: int | None = None,
    ) -> UploadedResource:
        """Record a file the client has placed in the blob store.

        The expiry is fixed now from the current retention window; later
        changes to the window do not touch existing rows.
        """
        conversation = await self._conversations.get(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            raise NotFoundError(f"Conversation not found: {conversation_id}")
        if not storage_id.strip():
            raise ValidationError("storage_id must not be empty", field="storage_id")
        if size is not None and size < 0:
            raise ValidationError("size must not be negative", field="size")

        resource = UploadedResource.create(
            conversation_id=conversation_id,
            storage_url=storage_url,
            storage_id=storage_id,
            file_type=file_type,
            size=size,
            retention_days=self._retention_days,
        )
        await self._repo.save(resource)
        logger.info(
            "Upload registered: id=%s, conversation=%s, expires=%s",
            resource.id,
            conversation_id,
            resource.auto_delete_at.isoformat(),
        )
        return resource

    async def list_for_conversation(
        self, user_id: UserId, conversation_id: ConversationId
    ) -> list[UploadedResource]:
        conversation = await self._conversations.get(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            raise NotFoundError(f"Conversation not found: {conversation_id}")
        return await self._repo.list_for_conversation(conversation_id)

    async def sweep(self, now: datetime | None = None) -> SweepReport:
        """Delete every expired, not-yet-deleted resource.

        Batches are paged by (auto_delete_at, id) so every expired row is
        attempted exactly once per sweep; rows that fail stay behind the
        cursor until the next run.
        """
        now = now or datetime.now(UTC)
        report = SweepReport()
        cursor: tuple[datetime, UploadedResourceId] | None = None

        while True:
            batch = await self._repo.list_expired(now, limit=self._batch_size, after=cursor)
            # End the read transaction before any network call
            await self._uow.commit()
            if not batch:
                break

            for resource in batch:
                try:
                    outcome = await self._blob_store.delete(resource.storage_id)
                except BlobDeletionFailedError as e:
                    logger.warning(
                        "Blob deletion failed, leaving row for next sweep: id=%s, storage_id=%s: %s",
                        resource.id,
                        resource.storage_id,
                        e.reason,
                    )
                    report.failed.append(
                        SweepFailure(
                            resource_id=resource.id,
                            storage_id=resource.storage_id,
                            reason=e.reason,
                        )
                    )
                    continue

                if await self._repo.mark_deleted(resource.id, now):
                    if outcome is BlobDeletion.NOT_FOUND:
                        report.missing.append(resource.id)
                    else:
                        report.deleted.append(resource.id)
                await self._uow.commit()

            if len(batch) < self._batch_size:
                break
            last = batch[-1]
            cursor = (last.auto_delete_at, last.id)

        if report.swept or report.failed:
            logger.info(
                "Retention sweep: deleted=%d, already_missing=%d, failed=%d",
                len(report.deleted),
                len(report.missing),
                len(report.failed),
            )
        return report
