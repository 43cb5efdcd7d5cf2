"""ASGI adapter for the access gate."""

import logging

from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from redflag.config import Config
from redflag.domain.access.model.value import RedirectTo
from redflag.domain.access.service.gate import AccessGate
from redflag.domain.auth.util.di.provider import credential_from_request

logger = logging.getLogger(__name__)

# Browsers retry a 302 as GET, which is the only method the guest endpoint takes
GATE_REDIRECT_STATUS = 302


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Runs AccessGate.decide for every HTTP request before routing.

    The gate and config are APP-scoped, so they come from the root container
    rather than the per-request UOW scope.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        container = request.app.state.dishka_container
        gate = await container.get(AccessGate)
        config = await container.get(Config)

        credential = credential_from_request(request, config.auth.session.cookie_name)
        decision = gate.decide(request.url.path, credential, request.url.query)

        if isinstance(decision, RedirectTo):
            logger.debug("Gate redirect %s -> %s", request.url.path, decision.url)
            return RedirectResponse(url=decision.url, status_code=GATE_REDIRECT_STATUS)

        return await call_next(request)
