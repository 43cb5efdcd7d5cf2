from dishka import provide

from redflag.config import Config
from redflag.domain.usage.port.repository import UsageRepository
from redflag.domain.usage.service.usage import UsageLimiter
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class UsageProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_usage_limiter(self, config: Config, repo: UsageRepository) -> UsageLimiter:
        return UsageLimiter(
            _repo=repo,
            _zone=config.usage.zone,
            _daily_limit=config.usage.daily_analysis_limit,
            _guest_daily_limit=config.usage.guest_daily_analysis_limit,
        )
