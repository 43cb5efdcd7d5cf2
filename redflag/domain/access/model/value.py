"""Route classes and gate decisions."""

from dataclasses import dataclass
from enum import StrEnum


class RouteClass(StrEnum):
    PUBLIC = "public"
    AUTH_ENDPOINT = "auth_endpoint"
    PROTECTED = "protected"


@dataclass(frozen=True)
class RouteRule:
    """Case-sensitive path-prefix rule."""

    prefix: str
    route_class: RouteClass

    def matches(self, path: str) -> bool:
        return path.startswith(self.prefix)


@dataclass(frozen=True)
class Allow:
    """Pass the request through to the next handler."""


@dataclass(frozen=True)
class RedirectTo:
    """Answer the request with a redirect to `url`."""

    url: str


Decision = Allow | RedirectTo

ALLOW = Allow()
