"""Per-user daily usage accounting."""

import datetime as dt

from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.model.aggregate import Aggregate
from redflag.domain.shared.model.value import ValueObject


class UsageRecord(Aggregate):
    """Analysis count for one user on one calendar day.

    Exactly one record exists per (user_id, date); increments accumulate
    into it. Records are kept as an audit trail.
    """

    user_id: UserId
    date: dt.date
    analysis_count: int
    created_at: dt.datetime


class UsageSummary(ValueObject):
    """Today's usage as reported to clients."""

    date: dt.date
    count: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)
