"""Repository ports for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from redflag.domain.auth.model.user import User
from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.port import Port


class UserRepository(Port, Protocol):
    """Repository for User aggregate persistence."""

    @abstractmethod
    async def get(self, user_id: UserId) -> User | None:
        """Get a user by ID."""
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email label (exact match)."""
        ...

    @abstractmethod
    async def save(self, user: User) -> None:
        """Save a user (create or update)."""
        ...
