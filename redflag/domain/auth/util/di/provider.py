"""DI provider for auth domain."""

import logging

from dishka import from_context, provide
from starlette.requests import Request

from redflag.config import Config
from redflag.domain.auth.model.identity import SessionIdentity
from redflag.domain.auth.port.repository import UserRepository
from redflag.domain.auth.service.auth import AuthService
from redflag.domain.auth.service.guest import GuestService
from redflag.domain.auth.service.session import SessionResolver
from redflag.domain.auth.service.token import SessionTokenService
from redflag.domain.shared.error import AuthorizationError
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope

logger = logging.getLogger(__name__)


def credential_from_request(request: Request, cookie_name: str) -> str | None:
    """Session credential from the session cookie, falling back to a Bearer header."""
    cookie = request.cookies.get(cookie_name)
    if cookie:
        return cookie
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


class AuthProvider(Provider):
    """DI provider for auth domain services."""

    request = from_context(provides=Request, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_token_service(self, config: Config) -> SessionTokenService:
        return SessionTokenService(_config=config.auth.session)

    @provide(scope=Scope.APP)
    def get_session_resolver(self, tokens: SessionTokenService) -> SessionResolver:
        return SessionResolver(_tokens=tokens)

    @provide(scope=Scope.UOW)
    def get_auth_service(
        self, user_repo: UserRepository, tokens: SessionTokenService
    ) -> AuthService:
        return AuthService(_user_repo=user_repo, _tokens=tokens)

    @provide(scope=Scope.UOW)
    def get_guest_service(
        self, config: Config, user_repo: UserRepository, tokens: SessionTokenService
    ) -> GuestService:
        return GuestService(_user_repo=user_repo, _tokens=tokens, _config=config.auth.guest)

    @provide(scope=Scope.UOW)
    def get_session_identity(
        self,
        request: Request,
        config: Config,
        resolver: SessionResolver,
    ) -> SessionIdentity:
        """Resolve the caller's session for API routes.

        Raises:
            AuthorizationError: If no valid session accompanies the request
        """
        credential = credential_from_request(request, config.auth.session.cookie_name)
        identity = resolver.resolve(credential)
        if identity is None:
            raise AuthorizationError("Authentication required", code="missing_session")
        return identity
