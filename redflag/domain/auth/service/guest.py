"""Guest identity bootstrap."""

import logging
from urllib.parse import quote, urlsplit

from redflag.config import GuestConfig
from redflag.domain.auth.model.user import User
from redflag.domain.auth.port.repository import UserRepository
from redflag.domain.auth.service.token import SessionTokenService
from redflag.domain.shared.service import Service

logger = logging.getLogger(__name__)

REDIRECT_PARAM = "redirectUrl"


def guest_redirect_url(endpoint: str, original_url: str) -> str:
    """Build the provisioning redirect, carrying the original target percent-encoded."""
    return f"{endpoint}?{REDIRECT_PARAM}={quote(original_url, safe='')}"


def safe_return_path(redirect_url: str | None, default: str = "/") -> str:
    """Accept only same-site absolute paths as post-provisioning targets.

    The value arrives already decoded from the query string and is not
    decoded again; anything with a scheme, a host or a protocol-relative
    prefix falls back to the default so the endpoint is not an open redirect.
    """
    if not redirect_url:
        return default
    parts = urlsplit(redirect_url)
    if parts.scheme or parts.netloc or not redirect_url.startswith("/") or redirect_url.startswith("//"):
        return default
    if "\\" in redirect_url:
        return default
    return redirect_url


class GuestService(Service):
    """Provisions transient anonymous users and signs their sessions."""

    _user_repo: UserRepository
    _tokens: SessionTokenService
    _config: GuestConfig

    async def provision(self) -> tuple[User, str]:
        """Create and persist a guest user.

        Returns:
            Tuple of (user, session_token)
        """
        user = User.create_guest()
        await self._user_repo.save(user)
        token = self._tokens.create_session_token(
            user.id, user.email, expire_days=self._config.expire_days
        )
        logger.info("Guest user provisioned: user_id=%s, label=%s", user.id, user.email)
        return user, token

    @property
    def session_max_age(self) -> int:
        return self._tokens.max_age_seconds(self._config.expire_days)
