"""SQLAlchemy repository implementations for the auth domain."""

from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from redflag.domain.auth.model.user import User
from redflag.domain.auth.model.value import UserId
from redflag.domain.auth.port.repository import UserRepository
from redflag.infrastructure.persistence.mappers import as_utc
from redflag.infrastructure.persistence.tables import users_table


def _row_to_user(row: dict) -> User:
    """Convert a database row to a User model."""
    return User(
        id=UserId(UUID(row["id"])),
        email=row["email"],
        password_hash=row["password_hash"],
        email_verified=as_utc(row["email_verified"]),
        name=row["name"],
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
    )


def _user_to_dict(user: User) -> dict:
    """Convert a User model to a database row dict."""
    return {
        "id": str(user.id),
        "email": user.email,
        "password_hash": user.password_hash,
        "email_verified": user.email_verified,
        "name": user.name,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class SQLAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: UserId) -> User | None:
        stmt = select(users_table).where(users_table.c.id == str(user_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(users_table).where(users_table.c.email == email)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def save(self, user: User) -> None:
        user_dict = _user_to_dict(user)
        existing = await self.get(user.id)

        if existing:
            # Only the verification flag is mutable
            stmt = (
                update(users_table)
                .where(users_table.c.id == str(user.id))
                .values(
                    email_verified=user_dict["email_verified"],
                    updated_at=user_dict["updated_at"],
                )
            )
        else:
            stmt = insert(users_table).values(**user_dict)

        await self.session.execute(stmt)
        await self.session.flush()
