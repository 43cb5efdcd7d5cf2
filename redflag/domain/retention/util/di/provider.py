from dishka import provide

from redflag.config import Config
from redflag.domain.conversation.port.repository import ConversationRepository
from redflag.domain.retention.port.blob_store import BlobStore
from redflag.domain.retention.port.repository import UploadedResourceRepository
from redflag.domain.retention.service.retention import RetentionService
from redflag.domain.shared.uow import UnitOfWork
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class RetentionProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_retention_service(
        self,
        config: Config,
        repo: UploadedResourceRepository,
        conversations: ConversationRepository,
        blob_store: BlobStore,
        uow: UnitOfWork,
    ) -> RetentionService:
        return RetentionService(
            _repo=repo,
            _conversations=conversations,
            _blob_store=blob_store,
            _uow=uow,
            _retention_days=config.retention.days,
            _batch_size=config.retention.sweep_batch_size,
        )
