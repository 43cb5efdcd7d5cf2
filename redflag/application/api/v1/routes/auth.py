"""Authentication routes: guest bootstrap, credentials, session."""

import logging
from typing import Annotated

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from redflag.config import Config
from redflag.domain.auth.model.identity import SessionIdentity
from redflag.domain.auth.model.user import User
from redflag.domain.auth.service.auth import AuthService
from redflag.domain.auth.service.guest import REDIRECT_PARAM, GuestService, safe_return_path
from redflag.domain.auth.service.session import SessionResolver
from redflag.domain.auth.service.token import SessionTokenService
from redflag.domain.auth.util.di.provider import credential_from_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"], route_class=DishkaRoute)


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    """Identity summary returned to clients. Never carries the raw token."""

    id: str
    email: str
    is_guest: bool


class SessionResponse(BaseModel):
    user: UserResponse
    expires_in: int


class LogoutResponse(BaseModel):
    success: bool


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=str(user.id), email=user.email, is_guest=user.is_guest)


def _set_session_cookie(response: Response, config: Config, token: str, max_age: int) -> None:
    session = config.auth.session
    response.set_cookie(
        key=session.cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=session.cookie_secure,
        samesite="lax",
        path="/",
    )


@router.get("/guest")
async def provision_guest(
    request: Request,
    config: FromDishka[Config],
    resolver: FromDishka[SessionResolver],
    guests: FromDishka[GuestService],
    redirect_url: Annotated[str | None, Query(alias=REDIRECT_PARAM)] = None,
) -> Response:
    """Create a guest identity, set its session and return to the original page.

    A caller that already holds a valid session is sent straight back
    without provisioning another guest.
    """
    target = safe_return_path(redirect_url, default=config.server.home_path)
    response = RedirectResponse(url=target, status_code=302)

    credential = credential_from_request(request, config.auth.session.cookie_name)
    if resolver.resolve(credential) is not None:
        return response

    _, token = await guests.provision()
    _set_session_cookie(response, config, token, guests.session_max_age)
    return response


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    config: FromDishka[Config],
    auth: FromDishka[AuthService],
    tokens: FromDishka[SessionTokenService],
) -> SessionResponse:
    user, token = await auth.register(body.email, body.password, body.name)
    max_age = tokens.max_age_seconds()
    _set_session_cookie(response, config, token, max_age)
    return SessionResponse(user=_user_response(user), expires_in=max_age)


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    config: FromDishka[Config],
    auth: FromDishka[AuthService],
    tokens: FromDishka[SessionTokenService],
) -> SessionResponse:
    user, token = await auth.login(body.email, body.password)
    max_age = tokens.max_age_seconds()
    _set_session_cookie(response, config, token, max_age)
    return SessionResponse(user=_user_response(user), expires_in=max_age)


@router.post("/logout")
async def logout(response: Response, config: FromDishka[Config]) -> LogoutResponse:
    """Clear the session cookie. Tokens are stateless, so nothing is revoked server-side."""
    response.delete_cookie(key=config.auth.session.cookie_name, path="/")
    return LogoutResponse(success=True)


@router.get("/session")
async def get_session(identity: FromDishka[SessionIdentity]) -> UserResponse:
    return UserResponse(
        id=str(identity.user_id),
        email=identity.label,
        is_guest=identity.is_guest,
    )
