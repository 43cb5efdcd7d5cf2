"""Dependency injection provider for scheduled tasks."""

import logging

from dishka import AsyncContainer, provide

from redflag.config import Config
from redflag.domain.retention.schedule.sweep_schedule import RetentionSweepSchedule
from redflag.infrastructure.scheduler.pool import ScheduleConfig, ScheduleConfigs, SchedulePool
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope

logger = logging.getLogger(__name__)

RETENTION_SWEEP_ID = "retention-sweep"


class SchedulerProvider(Provider):
    """Schedules are UOW-scoped; the pool is an APP-scoped singleton."""

    retention_sweep = provide(RetentionSweepSchedule, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_schedule_configs(self, config: Config) -> ScheduleConfigs:
        schedules: list[ScheduleConfig] = []
        if config.retention.sweep_enabled:
            schedules.append(
                ScheduleConfig(
                    schedule_type=RetentionSweepSchedule,
                    cron=config.retention.sweep_cron,
                    id=RETENTION_SWEEP_ID,
                )
            )
        return ScheduleConfigs(schedules)

    @provide(scope=Scope.APP)
    def get_schedule_pool(
        self, container: AsyncContainer, schedules: ScheduleConfigs
    ) -> SchedulePool:
        pool = SchedulePool(container=container, schedules=schedules)
        logger.info(f"SchedulePool created with {len(schedules)} schedules")
        return pool
