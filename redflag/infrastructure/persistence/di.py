from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from redflag.config import Config
from redflag.domain.auth.port.repository import UserRepository
from redflag.domain.conversation.port.repository import ConversationRepository
from redflag.domain.retention.port.repository import UploadedResourceRepository
from redflag.domain.shared.uow import UnitOfWork
from redflag.domain.usage.port.repository import UsageRepository
from redflag.infrastructure.persistence.database import create_db_engine, create_session_factory
from redflag.infrastructure.persistence.repository.auth import SQLAlchemyUserRepository
from redflag.infrastructure.persistence.repository.conversation import (
    SQLAlchemyConversationRepository,
)
from redflag.infrastructure.persistence.repository.retention import (
    SQLAlchemyUploadedResourceRepository,
)
from redflag.infrastructure.persistence.repository.usage import SQLAlchemyUsageRepository
from redflag.infrastructure.persistence.uow import SQLAlchemyUnitOfWork
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class PersistenceProvider(Provider):
    # APP-scoped factories
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # UOW-scoped session (one per unit of work)
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session
            await session.commit()

    uow = provide(SQLAlchemyUnitOfWork, scope=Scope.UOW, provides=UnitOfWork)

    # UOW-scoped repositories
    user_repo = provide(SQLAlchemyUserRepository, scope=Scope.UOW, provides=UserRepository)
    conversation_repo = provide(
        SQLAlchemyConversationRepository, scope=Scope.UOW, provides=ConversationRepository
    )
    resource_repo = provide(
        SQLAlchemyUploadedResourceRepository,
        scope=Scope.UOW,
        provides=UploadedResourceRepository,
    )
    usage_repo = provide(SQLAlchemyUsageRepository, scope=Scope.UOW, provides=UsageRepository)
