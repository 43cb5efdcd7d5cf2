"""Access gate: one allow/redirect decision per request."""

import logging

from redflag.domain.access.model.value import ALLOW, Decision, RedirectTo, RouteClass
from redflag.domain.access.service.classifier import RouteClassifier
from redflag.domain.auth.model.identity import SessionIdentity
from redflag.domain.auth.service.guest import guest_redirect_url
from redflag.domain.auth.service.session import SessionResolver
from redflag.domain.shared.error import ConfigurationError
from redflag.domain.shared.service import Service

logger = logging.getLogger(__name__)

AUTH_PAGES = frozenset({"/login", "/register"})


class AccessGate(Service):
    """Decides, per request, whether to allow or redirect.

    Decision table, first applicable rule wins:

    1. Public route (other than an auth page): allow.
    2. Auth endpoint: allow. Never gated, so redirects cannot loop.
    3. No session: redirect to guest bootstrap carrying the original URL.
       Auth pages are exempt; an anonymous visitor must reach the login form.
    4. Guest session on an auth page: allow.
    5. Registered session on an auth page: redirect home.
    6. Otherwise: allow.

    Pure with respect to (path, query, credential); the only time dependence
    is credential expiry inside the resolver.
    """

    _classifier: RouteClassifier
    _resolver: SessionResolver
    _guest_endpoint: str | None = "/api/auth/guest"
    _login_path: str = "/login"
    _home_path: str = "/"
    _auth_pages: frozenset[str] = AUTH_PAGES

    def decide(self, path: str, credential: str | None, query: str = "") -> Decision:
        route = self._classifier.classify(path)
        is_auth_page = path in self._auth_pages

        if route is RouteClass.PUBLIC and not is_auth_page:
            return ALLOW

        if route is RouteClass.AUTH_ENDPOINT:
            return ALLOW

        identity = self._resolve(credential)

        if identity is None:
            if is_auth_page:
                return ALLOW
            return self._bootstrap_redirect(path, query)

        if is_auth_page:
            if identity.is_guest:
                return ALLOW
            logger.debug("Registered user %s redirected away from %s", identity.user_id, path)
            return RedirectTo(self._home_path)

        return ALLOW

    def check_bootstrap_reachable(self) -> None:
        """Fail fast if the redirect targets would themselves be gated.

        Raises:
            ConfigurationError: If the guest endpoint (or login page when
                guests are disabled) classifies as protected.
        """
        target = self._guest_endpoint or self._login_path
        if self._classifier.classify(target) is RouteClass.PROTECTED:
            raise ConfigurationError(
                f"Bootstrap target {target} is protected; requests would redirect in a loop"
            )

    def _resolve(self, credential: str | None) -> SessionIdentity | None:
        try:
            return self._resolver.resolve(credential)
        except Exception:
            # Fail toward re-authentication, never toward exposing content
            logger.exception("Session resolver failed; treating request as anonymous")
            return None

    def _bootstrap_redirect(self, path: str, query: str) -> RedirectTo:
        if self._guest_endpoint is None:
            return RedirectTo(self._login_path)
        original = f"{path}?{query}" if query else path
        logger.debug("No session for %s, redirecting to guest bootstrap", path)
        return RedirectTo(guest_redirect_url(self._guest_endpoint, original))
