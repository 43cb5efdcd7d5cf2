from dishka import AsyncContainer, from_context, make_async_container

from redflag.config import Config
from redflag.domain.access.util.di.provider import AccessProvider
from redflag.domain.auth.util.di.provider import AuthProvider
from redflag.domain.conversation.util.di.provider import ConversationProvider
from redflag.domain.retention.util.di.provider import RetentionProvider
from redflag.domain.usage.util.di.provider import UsageProvider
from redflag.infrastructure.blob.di import BlobStoreProvider
from redflag.infrastructure.persistence.di import PersistenceProvider
from redflag.infrastructure.scheduler.di import SchedulerProvider
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        BlobStoreProvider(),
        SchedulerProvider(),
        AuthProvider(),
        AccessProvider(),
        UsageProvider(),
        ConversationProvider(),
        RetentionProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
