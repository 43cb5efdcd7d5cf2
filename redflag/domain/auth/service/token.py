"""Session token service: signs and validates session credentials."""

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from redflag.config import SessionConfig
from redflag.domain.auth.model.value import UserId
from redflag.domain.shared.service import Service

logger = logging.getLogger(__name__)

SESSION_AUDIENCE = "authenticated"


class SessionTokenService(Service):
    """Service for signed session tokens.

    Session tokens are JWTs (HS256 by default) carrying the user id and the
    user's email label. The label is what the access gate uses to tell guests
    from registered users.
    """

    _config: SessionConfig

    def create_session_token(
        self,
        user_id: UserId,
        label: str,
        expire_days: int | None = None,
    ) -> str:
        """Create a signed session token.

        Args:
            user_id: The user's internal ID
            label: The user's email label (guest-<digits> for guests)
            expire_days: Override for the configured lifetime

        Returns:
            Encoded JWT string
        """
        now = datetime.now(UTC)
        days = expire_days if expire_days is not None else self._config.expire_days
        expires_at = now + timedelta(days=days)

        payload = {
            "sub": str(user_id),
            "email": label,
            "aud": SESSION_AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_hex(16),
        }

        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def validate_session_token(self, token: str) -> dict[str, Any]:
        """Validate and decode a session token.

        Raises:
            jwt.InvalidTokenError: If token is malformed, badly signed or expired
        """
        return jwt.decode(
            token,
            self._config.secret,
            algorithms=[self._config.algorithm],
            audience=SESSION_AUDIENCE,
            options={"require": ["sub", "email", "exp"]},
        )

    def max_age_seconds(self, expire_days: int | None = None) -> int:
        """Cookie max-age matching the token lifetime."""
        days = expire_days if expire_days is not None else self._config.expire_days
        return days * 24 * 60 * 60
