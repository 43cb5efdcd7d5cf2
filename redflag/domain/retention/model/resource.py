"""Uploaded resource aggregate and its retention arithmetic."""

from datetime import UTC, datetime, timedelta

from redflag.domain.conversation.model.conversation import ConversationId
from redflag.domain.shared.error import ValidationError
from redflag.domain.shared.model.aggregate import Aggregate
from redflag.domain.shared.model.value import Identifier


class UploadedResourceId(Identifier):
    """Unique identifier for an UploadedResource."""


def compute_expiry(created_at: datetime, retention_days: int) -> datetime:
    """Expiry of a resource created at `created_at` under a `retention_days` window."""
    if isinstance(retention_days, bool) or not isinstance(retention_days, int) or retention_days <= 0:
        raise ValidationError(
            f"Retention window must be a positive number of days, got {retention_days!r}",
            field="retention_days",
        )
    return created_at + timedelta(days=retention_days)


class UploadedResource(Aggregate):
    """A file held in the external blob store on behalf of a conversation.

    Invariants:
    - `auto_delete_at` = `created_at` + retention window, fixed at creation
    - once `deleted_at` is set the blob has been removed (or was already gone)
    """

    id: UploadedResourceId
    conversation_id: ConversationId
    storage_url: str
    storage_id: str
    file_type: str
    size: int | None = None
    created_at: datetime
    auto_delete_at: datetime
    deleted_at: datetime | None = None

    @classmethod
    def create(
        cls,
        conversation_id: ConversationId,
        storage_url: str,
        storage_id: str,
        file_type: str,
        retention_days: int,
        size: int | None = None,
        now: datetime | None = None,
    ) -> "UploadedResource":
        created_at = now or datetime.now(UTC)
        return cls(
            id=UploadedResourceId.generate(),
            conversation_id=conversation_id,
            storage_url=storage_url,
            storage_id=storage_id,
            file_type=file_type,
            size=size,
            created_at=created_at,
            auto_delete_at=compute_expiry(created_at, retention_days),
        )

    def is_sweepable(self, now: datetime) -> bool:
        return self.deleted_at is None and self.auto_delete_at <= now
