"""SQLAlchemy repository for uploaded resources."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from redflag.domain.conversation.model.conversation import ConversationId
from redflag.domain.retention.model.resource import UploadedResource, UploadedResourceId
from redflag.domain.retention.port.repository import UploadedResourceRepository
from redflag.infrastructure.persistence.mappers import as_utc, to_utc
from redflag.infrastructure.persistence.tables import uploaded_files_table


def _row_to_resource(row: dict) -> UploadedResource:
    return UploadedResource(
        id=UploadedResourceId(UUID(row["id"])),
        conversation_id=ConversationId(UUID(row["conversation_id"])),
        storage_url=row["storage_url"],
        storage_id=row["storage_id"],
        file_type=row["file_type"],
        size=row["file_size"],
        created_at=as_utc(row["created_at"]),
        auto_delete_at=as_utc(row["auto_delete_at"]),
        deleted_at=as_utc(row["deleted_at"]),
    )


def _resource_to_dict(resource: UploadedResource) -> dict:
    return {
        "id": str(resource.id),
        "conversation_id": str(resource.conversation_id),
        "storage_url": resource.storage_url,
        "storage_id": resource.storage_id,
        "file_type": resource.file_type,
        "file_size": resource.size,
        "created_at": to_utc(resource.created_at),
        "auto_delete_at": to_utc(resource.auto_delete_at),
        "deleted_at": to_utc(resource.deleted_at) if resource.deleted_at else None,
    }


class SQLAlchemyUploadedResourceRepository(UploadedResourceRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(
        self, resource_id: UploadedResourceId, include_deleted: bool = False
    ) -> UploadedResource | None:
        stmt = select(uploaded_files_table).where(uploaded_files_table.c.id == str(resource_id))
        if not include_deleted:
            stmt = stmt.where(uploaded_files_table.c.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_resource(dict(row)) if row else None

    async def save(self, resource: UploadedResource) -> None:
        await self.session.execute(insert(uploaded_files_table).values(**_resource_to_dict(resource)))
        await self.session.flush()

    async def list_for_conversation(
        self, conversation_id: ConversationId, include_deleted: bool = False
    ) -> list[UploadedResource]:
        stmt = (
            select(uploaded_files_table)
            .where(uploaded_files_table.c.conversation_id == str(conversation_id))
            .order_by(uploaded_files_table.c.created_at)
        )
        if not include_deleted:
            stmt = stmt.where(uploaded_files_table.c.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return [_row_to_resource(dict(row)) for row in result.mappings()]

    async def list_expired(
        self,
        now: datetime,
        limit: int,
        after: tuple[datetime, UploadedResourceId] | None = None,
    ) -> list[UploadedResource]:
        # Plain SELECT: no row locks are held while the caller talks to the blob store
        t = uploaded_files_table
        stmt = (
            select(t)
            .where(t.c.auto_delete_at <= to_utc(now), t.c.deleted_at.is_(None))
            .order_by(t.c.auto_delete_at, t.c.id)
            .limit(limit)
        )
        if after is not None:
            after_at, after_id = to_utc(after[0]), str(after[1])
            stmt = stmt.where(
                or_(
                    t.c.auto_delete_at > after_at,
                    and_(t.c.auto_delete_at == after_at, t.c.id > after_id),
                )
            )
        result = await self.session.execute(stmt)
        return [_row_to_resource(dict(row)) for row in result.mappings()]

    async def mark_deleted(self, resource_id: UploadedResourceId, at: datetime) -> bool:
        result = await self.session.execute(
            update(uploaded_files_table)
            .where(
                uploaded_files_table.c.id == str(resource_id),
                uploaded_files_table.c.deleted_at.is_(None),
            )
            .values(deleted_at=to_utc(at))
        )
        return bool(result.rowcount)
