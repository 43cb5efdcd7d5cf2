"""Port for the external blob store holding uploaded files."""

from abc import abstractmethod
from typing import Protocol

from redflag.domain.retention.model.value import BlobDeletion
from redflag.domain.shared.port import Port


class BlobStore(Port, Protocol):
    @abstractmethod
    async def delete(self, storage_id: str) -> BlobDeletion:
        """Delete a blob by storage identifier.

        Returns:
            DELETED, or NOT_FOUND if the store no longer has it.

        Raises:
            BlobDeletionFailedError: On any other outcome.
        """
        ...
