"""Dishka scopes used across the red-flag backend."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]
    """APP -> UOW.

    APP objects live as long as the process: engine, token service, gate,
    HTTP client, schedule pool. UOW objects live for one HTTP request, one
    scheduled run or one CLI command, and share a single database session.
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
