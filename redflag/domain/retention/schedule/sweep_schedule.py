"""RetentionSweepSchedule - scheduled task that runs a retention sweep."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from redflag.domain.retention.service.retention import RetentionService
from redflag.domain.shared.schedule import Schedule

logger = logging.getLogger(__name__)


@dataclass
class RetentionSweepSchedule(Schedule):
    """Sweeps expired uploads on the configured cron."""

    retention: RetentionService

    async def run(self, **params: Any) -> None:
        report = await self.retention.sweep(datetime.now(UTC))
        if report.failed:
            logger.warning("Retention sweep left %d rows for retry", len(report.failed))
