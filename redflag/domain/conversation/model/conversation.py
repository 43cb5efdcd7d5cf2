"""Conversation and message aggregates."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.model.aggregate import Aggregate
from redflag.domain.shared.model.value import Identifier


class ConversationId(Identifier):
    """Unique identifier for a Conversation."""


class MessageId(Identifier):
    """Unique identifier for a Message."""


class Category(StrEnum):
    DATING = "dating"
    CONVERSATIONS = "conversations"
    JOBS = "jobs"
    HOUSING = "housing"
    MARKETPLACE = "marketplace"
    GENERAL = "general"


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Conversation(Aggregate):
    """A conversation submitted for analysis, owned by exactly one user.

    A non-null `deleted_at` hides the conversation from every normal read.
    """

    id: ConversationId
    user_id: UserId
    title: str
    category: Category | None = None
    red_flag_score: float | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @classmethod
    def create(cls, user_id: UserId, title: str, category: Category | None = None) -> "Conversation":
        now = datetime.now(UTC)
        return cls(
            id=ConversationId.generate(),
            user_id=user_id,
            title=title,
            category=category,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class Message(Aggregate):
    id: MessageId
    conversation_id: ConversationId
    role: Role
    content: str
    red_flag_data: dict[str, Any] | None = None
    created_at: datetime
    deleted_at: datetime | None = None

    @classmethod
    def create(
        cls,
        conversation_id: ConversationId,
        role: Role,
        content: str,
        red_flag_data: dict[str, Any] | None = None,
    ) -> "Message":
        return cls(
            id=MessageId.generate(),
            conversation_id=conversation_id,
            role=role,
            content=content,
            red_flag_data=red_flag_data,
            created_at=datetime.now(UTC),
        )
