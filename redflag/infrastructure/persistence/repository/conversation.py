"""SQLAlchemy repository for conversations and messages."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from redflag.domain.auth.model.value import UserId
from redflag.domain.conversation.model.conversation import (
    Category,
    Conversation,
    ConversationId,
    Message,
    MessageId,
    Role,
)
from redflag.domain.conversation.port.repository import ConversationRepository
from redflag.infrastructure.persistence.mappers import as_utc, to_utc
from redflag.infrastructure.persistence.tables import conversations_table, messages_table


def _row_to_conversation(row: dict) -> Conversation:
    return Conversation(
        id=ConversationId(UUID(row["id"])),
        user_id=UserId(UUID(row["user_id"])),
        title=row["title"],
        category=Category(row["category"]) if row["category"] else None,
        red_flag_score=row["red_flag_score"],
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
        deleted_at=as_utc(row["deleted_at"]),
    )


def _conversation_to_dict(conversation: Conversation) -> dict:
    return {
        "id": str(conversation.id),
        "user_id": str(conversation.user_id),
        "title": conversation.title,
        "category": conversation.category.value if conversation.category else None,
        "red_flag_score": conversation.red_flag_score,
        "created_at": conversation.created_at,
        "updated_at": conversation.updated_at,
        "deleted_at": conversation.deleted_at,
    }


def _row_to_message(row: dict) -> Message:
    return Message(
        id=MessageId(UUID(row["id"])),
        conversation_id=ConversationId(UUID(row["conversation_id"])),
        role=Role(row["role"]),
        content=row["content"],
        red_flag_data=row["red_flag_data"],
        created_at=as_utc(row["created_at"]),
        deleted_at=as_utc(row["deleted_at"]),
    )


class SQLAlchemyConversationRepository(ConversationRepository):
    """Conversations with `deleted_at IS NULL` as the visibility predicate."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(
        self, conversation_id: ConversationId, include_deleted: bool = False
    ) -> Conversation | None:
        stmt = select(conversations_table).where(conversations_table.c.id == str(conversation_id))
        if not include_deleted:
            stmt = stmt.where(conversations_table.c.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_conversation(dict(row)) if row else None

    async def list_for_user(
        self, user_id: UserId, include_deleted: bool = False, limit: int = 50
    ) -> list[Conversation]:
        stmt = (
            select(conversations_table)
            .where(conversations_table.c.user_id == str(user_id))
            .order_by(conversations_table.c.created_at.desc())
            .limit(limit)
        )
        if not include_deleted:
            stmt = stmt.where(conversations_table.c.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return [_row_to_conversation(dict(row)) for row in result.mappings()]

    async def save(self, conversation: Conversation) -> None:
        values = _conversation_to_dict(conversation)
        existing = await self.get(conversation.id, include_deleted=True)
        if existing:
            stmt = (
                update(conversations_table)
                .where(conversations_table.c.id == str(conversation.id))
                .values(**values)
            )
        else:
            stmt = insert(conversations_table).values(**values)
        await self.session.execute(stmt)
        await self.session.flush()

    async def soft_delete(self, conversation_id: ConversationId, at: datetime) -> bool:
        at = to_utc(at)
        result = await self.session.execute(
            update(conversations_table)
            .where(
                conversations_table.c.id == str(conversation_id),
                conversations_table.c.deleted_at.is_(None),
            )
            .values(deleted_at=at, updated_at=at)
        )
        if not result.rowcount:
            return False
        await self.session.execute(
            update(messages_table)
            .where(
                messages_table.c.conversation_id == str(conversation_id),
                messages_table.c.deleted_at.is_(None),
            )
            .values(deleted_at=at)
        )
        await self.session.flush()
        return True

    async def add_message(self, message: Message) -> None:
        await self.session.execute(
            insert(messages_table).values(
                id=str(message.id),
                conversation_id=str(message.conversation_id),
                role=message.role.value,
                content=message.content,
                red_flag_data=message.red_flag_data,
                created_at=message.created_at,
                deleted_at=message.deleted_at,
            )
        )
        await self.session.flush()

    async def list_messages(
        self, conversation_id: ConversationId, include_deleted: bool = False
    ) -> list[Message]:
        stmt = (
            select(messages_table)
            .where(messages_table.c.conversation_id == str(conversation_id))
            .order_by(messages_table.c.created_at)
        )
        if not include_deleted:
            stmt = stmt.where(messages_table.c.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return [_row_to_message(dict(row)) for row in result.mappings()]
