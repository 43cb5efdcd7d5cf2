"""Credential registration and login."""

import logging

from passlib.hash import pbkdf2_sha256 as hasher

from redflag.domain.auth.model.user import User
from redflag.domain.auth.model.value import is_guest_label
from redflag.domain.auth.port.repository import UserRepository
from redflag.domain.auth.service.token import SessionTokenService
from redflag.domain.shared.error import AuthorizationError, ConflictError, ValidationError
from redflag.domain.shared.service import Service

logger = logging.getLogger(__name__)

MAX_EMAIL_LENGTH = 64
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return hasher.verify(password, password_hash)


class AuthService(Service):
    """Orchestrates credential authentication.

    - register: create a registered user, issue a session
    - login: verify credentials, issue a session
    """

    _user_repo: UserRepository
    _tokens: SessionTokenService

    async def register(self, email: str, password: str, name: str | None = None) -> tuple[User, str]:
        """Register a new user.

        Raises:
            ValidationError: If the email is malformed, reserved, or the password too short
            ConflictError: If the email is already registered
        """
        email = email.strip().lower()
        if not email or "@" not in email or len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError("Invalid email address", field="email")
        if is_guest_label(email):
            raise ValidationError("Email uses a reserved label", field="email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
            )

        if await self._user_repo.get_by_email(email) is not None:
            raise ConflictError("Email already registered", code="email_taken")

        user = User.create(email=email, password_hash=hash_password(password), name=name)
        await self._user_repo.save(user)
        logger.info("User registered: user_id=%s", user.id)
        return user, self._tokens.create_session_token(user.id, user.email)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Verify credentials and issue a session token.

        Raises:
            AuthorizationError: If the credentials do not match a registered user
        """
        user = await self._user_repo.get_by_email(email.strip().lower())
        if user is None or user.password_hash is None or not verify_password(password, user.password_hash):
            logger.info("Login rejected for email=%s", email)
            raise AuthorizationError("Invalid email or password", code="invalid_credentials")

        logger.info("User logged in: user_id=%s", user.id)
        return user, self._tokens.create_session_token(user.id, user.email)
