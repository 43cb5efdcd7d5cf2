"""Value objects for retention sweeps."""

from dataclasses import dataclass, field
from enum import StrEnum

from redflag.domain.retention.model.resource import UploadedResourceId


class BlobDeletion(StrEnum):
    """Confirmed outcome of a blob store delete. Both count as success."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class SweepFailure:
    resource_id: UploadedResourceId
    storage_id: str
    reason: str


@dataclass
class SweepReport:
    """Outcome of one sweep run."""

    deleted: list[UploadedResourceId] = field(default_factory=list)
    missing: list[UploadedResourceId] = field(default_factory=list)  # Blob already gone
    failed: list[SweepFailure] = field(default_factory=list)

    @property
    def swept(self) -> int:
        return len(self.deleted) + len(self.missing)
