from pathlib import Path

from redflag.domain.retention.model.value import BlobDeletion
from redflag.domain.retention.port.blob_store import BlobStore
from redflag.domain.shared.error import BlobDeletionFailedError


class LocalBlobStore(BlobStore):
    """Local filesystem implementation of BlobStore."""

    def __init__(self, base_path: str) -> None:
        self.base_path = Path(base_path).expanduser()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _safe_path(self, storage_id: str) -> Path:
        """Resolve storage_id within base_path, rejecting path traversal attempts."""
        safe_name = Path(storage_id).name
        if not safe_name or safe_name != storage_id:
            raise BlobDeletionFailedError(storage_id, "invalid storage id")
        return self.base_path / safe_name

    async def delete(self, storage_id: str) -> BlobDeletion:
        target = self._safe_path(storage_id)
        try:
            target.unlink()
        except FileNotFoundError:
            return BlobDeletion.NOT_FOUND
        except OSError as e:
            raise BlobDeletionFailedError(storage_id, str(e)) from e
        return BlobDeletion.DELETED
