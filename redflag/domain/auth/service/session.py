"""Session resolver: credential in, identity summary (or nothing) out."""

import logging
from uuid import UUID

import jwt

from redflag.domain.auth.model.identity import SessionIdentity
from redflag.domain.auth.model.value import UserId
from redflag.domain.auth.service.token import SessionTokenService
from redflag.domain.shared.service import Service

logger = logging.getLogger(__name__)


class SessionResolver(Service):
    """Turns an inbound credential into a SessionIdentity.

    Absent, malformed, badly-signed and expired credentials all resolve to
    None. Callers cannot tell "invalid" from "absent", so routing always
    fails closed to anonymous.
    """

    _tokens: SessionTokenService

    def resolve(self, credential: str | None) -> SessionIdentity | None:
        if not credential:
            return None

        try:
            payload = self._tokens.validate_session_token(credential)
            return SessionIdentity(
                user_id=UserId(UUID(payload["sub"])),
                label=str(payload["email"]),
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Session token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("Session token rejected: %s", e)
            return None
        except (KeyError, ValueError, TypeError) as e:
            logger.debug("Session token payload unusable: %s", e)
            return None
