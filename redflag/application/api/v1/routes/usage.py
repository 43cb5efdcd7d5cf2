"""Daily usage routes for the rate-limited analysis operation."""

import datetime as dt

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter
from pydantic import BaseModel

from redflag.domain.auth.model.identity import SessionIdentity
from redflag.domain.usage.model.usage import UsageSummary
from redflag.domain.usage.service.usage import UsageLimiter

router = APIRouter(prefix="/api/usage", tags=["Usage"], route_class=DishkaRoute)


class UsageResponse(BaseModel):
    date: dt.date
    count: int
    limit: int
    remaining: int


def _usage_response(summary: UsageSummary) -> UsageResponse:
    return UsageResponse(
        date=summary.date,
        count=summary.count,
        limit=summary.limit,
        remaining=summary.remaining,
    )


@router.get("")
async def get_usage(
    identity: FromDishka[SessionIdentity],
    limiter: FromDishka[UsageLimiter],
) -> UsageResponse:
    """Today's count and ceiling for the caller."""
    limit = limiter.limit_for(identity.is_guest)
    summary = await limiter.current_usage(identity.user_id, limiter.today(), limit)
    return _usage_response(summary)


@router.post("/analyses", status_code=201)
async def consume_analysis(
    identity: FromDishka[SessionIdentity],
    limiter: FromDishka[UsageLimiter],
) -> UsageResponse:
    """Count one analysis against today's ceiling.

    Responds 429 once the ceiling is reached; the count is not changed then.
    """
    day = limiter.today()
    limit = limiter.limit_for(identity.is_guest)
    count = await limiter.check_and_increment(identity.user_id, day, limit)
    return _usage_response(UsageSummary(date=day, count=count, limit=limit))
