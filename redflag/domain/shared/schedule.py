"""Scheduled task base class."""

from abc import ABC, abstractmethod
from typing import Any


class Schedule(ABC):
    """Base class for scheduled tasks.

    Subclasses are dataclasses with DI-injected dependencies.
    The cron expression is provided via config, not on the class.

    Example:
        @dataclass
        class RetentionSweepSchedule(Schedule):
            retention: RetentionService

            async def run(self, **params: Any) -> None:
                await self.retention.sweep(datetime.now(UTC))
    """

    @abstractmethod
    async def run(self, **params: Any) -> None:
        """Run the scheduled task with parameters from config."""
        ...
