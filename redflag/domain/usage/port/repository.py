"""Repository port for usage records."""

from abc import abstractmethod
from datetime import date, datetime
from typing import Protocol

from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.port import Port
from redflag.domain.usage.model.usage import UsageRecord


class UsageRepository(Port, Protocol):
    @abstractmethod
    async def get(self, user_id: UserId, day: date) -> UsageRecord | None:
        """Get the record for (user, day), if any."""
        ...

    @abstractmethod
    async def increment_below(
        self, user_id: UserId, day: date, limit: int, now: datetime
    ) -> int | None:
        """Atomically create-or-increment the (user, day) count if it is below limit.

        Must be a single storage-level operation: concurrent callers for the
        same (user, day) may neither lose increments nor overshoot the limit.

        Returns:
            The new count, or None if the count was already at or above limit
            (in which case nothing is written).
        """
        ...

    @abstractmethod
    async def purge_before(self, day: date) -> int:
        """Delete records older than `day`. Returns the number removed."""
        ...
