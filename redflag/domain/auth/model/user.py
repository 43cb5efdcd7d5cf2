"""User aggregate for the auth domain."""

from datetime import UTC, datetime

from redflag.domain.auth.model.value import UserId, is_guest_label, make_guest_label
from redflag.domain.shared.model.aggregate import Aggregate


class User(Aggregate):
    """A registered or guest user.

    Invariants:
    - `id`, `email` and `created_at` are immutable after creation
    - guest users carry a `guest-<digits>` label and no password
    - only the email-verification timestamp changes after creation
    """

    id: UserId
    email: str
    password_hash: str | None = None
    email_verified: datetime | None = None
    name: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, email: str, password_hash: str | None, name: str | None = None) -> "User":
        now = datetime.now(UTC)
        return cls(
            id=UserId.generate(),
            email=email,
            password_hash=password_hash,
            name=name,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def create_guest(cls) -> "User":
        return cls.create(email=make_guest_label(), password_hash=None)

    @property
    def is_guest(self) -> bool:
        return is_guest_label(self.email)

    def mark_email_verified(self) -> None:
        now = datetime.now(UTC)
        self.email_verified = now
        self.updated_at = now
