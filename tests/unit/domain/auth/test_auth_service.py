"""Unit tests for AuthService registration and login."""

import pytest

from redflag.config import SessionConfig
from redflag.domain.auth.model.user import User
from redflag.domain.auth.model.value import UserId
from redflag.domain.auth.port.repository import UserRepository
from redflag.domain.auth.service.auth import AuthService, hash_password, verify_password
from redflag.domain.auth.service.session import SessionResolver
from redflag.domain.auth.service.token import SessionTokenService
from redflag.domain.shared.error import AuthorizationError, ConflictError, ValidationError


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self.users: dict[UserId, User] = {}

    async def get(self, user_id: UserId) -> User | None:
        return self.users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def save(self, user: User) -> None:
        self.users[user.id] = user


@pytest.fixture
def tokens() -> SessionTokenService:
    return SessionTokenService(_config=SessionConfig(secret="test-secret-key-256-bits-long-xx"))


@pytest.fixture
def repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def service(repo: InMemoryUserRepository, tokens: SessionTokenService) -> AuthService:
    return AuthService(_user_repo=repo, _tokens=tokens)


class TestPasswordHashing:
    def test_hash_verifies(self) -> None:
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_registered_user_with_session(
        self, service: AuthService, repo: InMemoryUserRepository, tokens: SessionTokenService
    ) -> None:
        user, token = await service.register("Alice@Example.com", "secret123", name="Alice")

        assert user.email == "alice@example.com"
        assert user.is_guest is False
        assert repo.users[user.id].name == "Alice"

        identity = SessionResolver(_tokens=tokens).resolve(token)
        assert identity is not None
        assert identity.user_id == user.id
        assert identity.is_guest is False

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service: AuthService) -> None:
        await service.register("alice@example.com", "secret123")

        with pytest.raises(ConflictError) as exc:
            await service.register("ALICE@example.com", "other-secret")
        assert exc.value.code == "email_taken"

    @pytest.mark.asyncio
    async def test_reserved_guest_label_is_refused(self, service: AuthService) -> None:
        with pytest.raises(ValidationError) as exc:
            await service.register("guest-12345", "secret123")
        assert exc.value.field == "email"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "no-at-sign", "a" * 60 + "@example.com"])
    async def test_invalid_email_is_refused(self, service: AuthService, email: str) -> None:
        with pytest.raises(ValidationError):
            await service.register(email, "secret123")

    @pytest.mark.asyncio
    async def test_short_password_is_refused(self, service: AuthService) -> None:
        with pytest.raises(ValidationError) as exc:
            await service.register("alice@example.com", "123")
        assert exc.value.field == "password"


class TestLogin:
    @pytest.mark.asyncio
    async def test_valid_credentials_issue_session(self, service: AuthService) -> None:
        registered, _ = await service.register("alice@example.com", "secret123")

        user, token = await service.login(" Alice@example.com ", "secret123")

        assert user.id == registered.id
        assert token

    @pytest.mark.asyncio
    async def test_wrong_password_is_rejected(self, service: AuthService) -> None:
        await service.register("alice@example.com", "secret123")

        with pytest.raises(AuthorizationError) as exc:
            await service.login("alice@example.com", "wrong-password")
        assert exc.value.code == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_unknown_email_is_rejected(self, service: AuthService) -> None:
        with pytest.raises(AuthorizationError):
            await service.login("nobody@example.com", "secret123")

    @pytest.mark.asyncio
    async def test_guest_cannot_log_in(
        self, service: AuthService, repo: InMemoryUserRepository
    ) -> None:
        guest = User.create_guest()
        await repo.save(guest)

        with pytest.raises(AuthorizationError):
            await service.login(guest.email, "anything")
