"""Conversation reads and soft deletion, scoped to the owning user."""

import logging
from datetime import UTC, datetime
from typing import Any

from redflag.domain.auth.model.value import UserId
from redflag.domain.conversation.model.conversation import (
    Category,
    Conversation,
    ConversationId,
    Message,
    Role,
)
from redflag.domain.conversation.port.repository import ConversationRepository
from redflag.domain.shared.error import NotFoundError, ValidationError
from redflag.domain.shared.service import Service

logger = logging.getLogger(__name__)


class ConversationService(Service):
    _repo: ConversationRepository

    async def create(self, user_id: UserId, title: str, category: Category | None = None) -> Conversation:
        title = title.strip()
        if not title:
            raise ValidationError("Title must not be empty", field="title")
        conversation = Conversation.create(user_id=user_id, title=title, category=category)
        await self._repo.save(conversation)
        return conversation

    async def list_for_user(self, user_id: UserId, limit: int = 50) -> list[Conversation]:
        return await self._repo.list_for_user(user_id, limit=limit)

    async def get_owned(self, user_id: UserId, conversation_id: ConversationId) -> Conversation:
        """Fetch a visible conversation owned by the user.

        Someone else's conversation is reported as not found, the same as a
        deleted or missing one.
        """
        conversation = await self._repo.get(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            raise NotFoundError(f"Conversation not found: {conversation_id}")
        return conversation

    async def messages(self, user_id: UserId, conversation_id: ConversationId) -> list[Message]:
        await self.get_owned(user_id, conversation_id)
        return await self._repo.list_messages(conversation_id)

    async def soft_delete(self, user_id: UserId, conversation_id: ConversationId) -> None:
        await self.get_owned(user_id, conversation_id)
        await self._repo.soft_delete(conversation_id, datetime.now(UTC))
        logger.info("Conversation soft-deleted: id=%s, user_id=%s", conversation_id, user_id)

    async def add_message(
        self,
        user_id: UserId,
        conversation_id: ConversationId,
        role: Role,
        content: str,
        red_flag_data: dict[str, Any] | None = None,
    ) -> Message:
        await self.get_owned(user_id, conversation_id)
        if not content.strip():
            raise ValidationError("Message content must not be empty", field="content")
        message = Message.create(
            conversation_id=conversation_id,
            role=role,
            content=content,
            red_flag_data=red_flag_data,
        )
        await self._repo.add_message(message)
        return message
