"""SQLAlchemy repository for daily usage records."""

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.error import ConfigurationError
from redflag.domain.usage.model.usage import UsageRecord
from redflag.domain.usage.port.repository import UsageRepository
from redflag.infrastructure.persistence.mappers import as_utc, to_utc
from redflag.infrastructure.persistence.tables import usage_logs_table

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _row_to_record(row: dict) -> UsageRecord:
    return UsageRecord(
        user_id=UserId(UUID(row["user_id"])),
        date=row["date"],
        analysis_count=row["analysis_count"],
        created_at=as_utc(row["created_at"]),
    )


class SQLAlchemyUsageRepository(UsageRepository):
    """Usage records with a single-statement conditional upsert.

    The increment is `INSERT ... ON CONFLICT (user_id, date) DO UPDATE SET
    analysis_count = analysis_count + 1 WHERE analysis_count < :limit
    RETURNING analysis_count`: the database serialises concurrent callers on
    the unique key, so there is no read-modify-write window.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _insert(self):
        dialect = self.session.bind.dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise ConfigurationError(f"Usage upsert not supported on dialect {dialect}") from None

    async def get(self, user_id: UserId, day: date) -> UsageRecord | None:
        stmt = select(usage_logs_table).where(
            usage_logs_table.c.user_id == str(user_id),
            usage_logs_table.c.date == day,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_record(dict(row)) if row else None

    async def increment_below(
        self, user_id: UserId, day: date, limit: int, now: datetime
    ) -> int | None:
        insert = self._insert()
        stmt = insert(usage_logs_table).values(
            id=str(uuid4()),
            user_id=str(user_id),
            date=day,
            analysis_count=1,
            created_at=to_utc(now),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[usage_logs_table.c.user_id, usage_logs_table.c.date],
            set_={"analysis_count": usage_logs_table.c.analysis_count + 1},
            where=usage_logs_table.c.analysis_count < limit,
        ).returning(usage_logs_table.c.analysis_count)

        result = await self.session.execute(stmt)
        row = result.first()
        await self.session.flush()
        return row[0] if row else None

    async def purge_before(self, day: date) -> int:
        stmt = delete(usage_logs_table).where(usage_logs_table.c.date < day)
        result = await self.session.execute(stmt)
        return result.rowcount or 0
