"""Usage limiter for rate-limited operations."""

import logging
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.error import RateLimitExceededError
from redflag.domain.shared.service import Service
from redflag.domain.usage.model.usage import UsageSummary
from redflag.domain.usage.port.repository import UsageRepository

logger = logging.getLogger(__name__)


class UsageLimiter(Service):
    """Enforces a per-user, per-day ceiling on a rate-limited operation.

    Callers consult `check_and_increment` before performing the operation.
    Calendar days are taken in a single deployment-wide zone, never per
    request.
    """

    _repo: UsageRepository
    _zone: ZoneInfo
    _daily_limit: int
    _guest_daily_limit: int

    def today(self, now: datetime | None = None) -> date:
        """Calendar date of `now` (default: current time) in the canonical zone."""
        now = now or datetime.now(UTC)
        return now.astimezone(self._zone).date()

    def limit_for(self, is_guest: bool) -> int:
        return self._guest_daily_limit if is_guest else self._daily_limit

    async def check_and_increment(self, user_id: UserId, day: date, limit: int) -> int:
        """Count one operation for (user, day) unless the ceiling is reached.

        Returns:
            The new count for the day.

        Raises:
            RateLimitExceededError: If the count is already >= limit. Nothing is written.
        """
        if limit <= 0:
            raise RateLimitExceededError("Daily limit reached", limit=limit, count=0)

        new_count = await self._repo.increment_below(user_id, day, limit, datetime.now(UTC))
        if new_count is None:
            logger.info("Rate limit reached: user_id=%s, date=%s, limit=%d", user_id, day, limit)
            raise RateLimitExceededError("Daily limit reached", limit=limit, count=limit)

        logger.debug("Usage counted: user_id=%s, date=%s, count=%d", user_id, day, new_count)
        return new_count

    async def current_usage(self, user_id: UserId, day: date, limit: int) -> UsageSummary:
        record = await self._repo.get(user_id, day)
        count = record.analysis_count if record else 0
        return UsageSummary(date=day, count=count, limit=limit)

    async def purge_before(self, day: date) -> int:
        removed = await self._repo.purge_before(day)
        if removed:
            logger.info("Purged %d usage records before %s", removed, day)
        return removed
