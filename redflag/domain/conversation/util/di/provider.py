from dishka import provide

from redflag.domain.conversation.port.repository import ConversationRepository
from redflag.domain.conversation.service.conversation import ConversationService
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class ConversationProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_conversation_service(self, repo: ConversationRepository) -> ConversationService:
        return ConversationService(_repo=repo)
