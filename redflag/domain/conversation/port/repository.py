"""Repository port for conversations and their messages.

Every read filters out soft-deleted rows unless `include_deleted=True`.
"""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from redflag.domain.auth.model.value import UserId
from redflag.domain.conversation.model.conversation import Conversation, ConversationId, Message
from redflag.domain.shared.port import Port


class ConversationRepository(Port, Protocol):
    @abstractmethod
    async def get(self, conversation_id: ConversationId, include_deleted: bool = False) -> Conversation | None: ...

    @abstractmethod
    async def list_for_user(
        self, user_id: UserId, include_deleted: bool = False, limit: int = 50
    ) -> list[Conversation]:
        """Conversations owned by the user, newest first."""
        ...

    @abstractmethod
    async def save(self, conversation: Conversation) -> None: ...

    @abstractmethod
    async def soft_delete(self, conversation_id: ConversationId, at: datetime) -> bool:
        """Set deleted_at on the conversation and its messages. False if already deleted."""
        ...

    @abstractmethod
    async def add_message(self, message: Message) -> None: ...

    @abstractmethod
    async def list_messages(
        self, conversation_id: ConversationId, include_deleted: bool = False
    ) -> list[Message]:
        """Messages in creation order."""
        ...
