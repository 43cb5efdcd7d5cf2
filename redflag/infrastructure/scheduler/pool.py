"""SchedulePool: runs scheduled tasks on cron triggers."""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, NewType

from apscheduler import AsyncScheduler
from apscheduler.triggers.cron import CronTrigger
from dishka import AsyncContainer

from redflag.domain.shared.schedule import Schedule
from redflag.util.di.scope import Scope

logger = logging.getLogger(__name__)

# Consecutive failures before a schedule is reported as critical
FAILURE_ALERT_THRESHOLD = 5


@dataclass
class ScheduleConfig:
    """Configuration for a scheduled task."""

    schedule_type: type[Schedule]
    cron: str
    id: str
    params: dict[str, Any] = field(default_factory=dict)


ScheduleConfigs = NewType("ScheduleConfigs", list[ScheduleConfig])


class SchedulePool:
    """Runs each configured Schedule in its own UOW scope on a cron trigger.

    Usage:
        pool = SchedulePool(container, schedules)

        async with pool:
            # Schedules are firing
            await serve()
        # Scheduler is stopped
    """

    def __init__(
        self,
        container: AsyncContainer | None = None,
        schedules: ScheduleConfigs | None = None,
    ) -> None:
        self._container = container
        self._schedules = schedules or ScheduleConfigs([])
        self._scheduler: AsyncScheduler | None = None
        self._exit_stack: AsyncExitStack | None = None
        self._schedule_failures: dict[str, int] = {}

    @property
    def schedules(self) -> list[ScheduleConfig]:
        return list(self._schedules)

    def failures(self, schedule_id: str) -> int:
        """Consecutive failures recorded for a schedule."""
        return self._schedule_failures.get(schedule_id, 0)

    async def start(self) -> None:
        """Start the scheduler and register every schedule as a cron task."""
        if self._container is None:
            raise RuntimeError("SchedulePool has no container")

        self._exit_stack = AsyncExitStack()
        await self._exit_stack.__aenter__()

        self._scheduler = AsyncScheduler()
        await self._exit_stack.enter_async_context(self._scheduler)

        for config in self._schedules:
            await self._scheduler.add_schedule(
                self.run_schedule,
                CronTrigger.from_crontab(config.cron),
                id=config.id,
                kwargs={"config": config},
            )
            logger.debug(f"Registered schedule {config.id} (cron={config.cron})")

        await self._scheduler.start_in_background()
        logger.info(f"SchedulePool started with {len(self._schedules)} schedules")

    async def stop(self) -> None:
        if self._exit_stack:
            await self._exit_stack.__aexit__(None, None, None)
            self._exit_stack = None
            self._scheduler = None
        logger.info("SchedulePool stopped")

    async def run_schedule(self, config: ScheduleConfig) -> None:
        """Cron task: run a scheduled task in UOW scope."""
        if self._container is None:
            return

        try:
            async with self._container(scope=Scope.UOW) as scope:
                schedule = await scope.get(config.schedule_type)
                await schedule.run(**config.params)

            # Reset failure counter on success
            self._schedule_failures.pop(config.id, None)
            logger.debug(f"Ran schedule {config.id}")

        except (asyncio.CancelledError, SystemExit, KeyboardInterrupt):
            # Let control exceptions propagate for graceful shutdown
            raise
        except Exception as e:
            failures = self._schedule_failures.get(config.id, 0) + 1
            self._schedule_failures[config.id] = failures
            logger.error(f"Failed to run schedule {config.id} (failures: {failures}): {e}")
            if failures >= FAILURE_ALERT_THRESHOLD:
                logger.critical(f"Schedule {config.id} has failed {failures} consecutive times")

    async def __aenter__(self) -> "SchedulePool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()
