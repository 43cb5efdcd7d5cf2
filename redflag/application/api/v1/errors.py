"""Centralized error transformation for API routes.

Maps domain and infrastructure errors to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from redflag.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    RateLimitExceededError,
    RedFlagError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    ConflictError: 409,
    AuthorizationError: 403,
    RateLimitExceededError: 429,
}

# Authorization codes that mean "who are you?" rather than "not allowed"
UNAUTHENTICATED_CODES = frozenset({"missing_session", "invalid_credentials"})


def map_error(error: RedFlagError) -> HTTPException:
    """Map a red-flag error to an HTTPException.

    Args:
        error: The error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        if isinstance(error, RateLimitExceededError):
            detail["limit"] = error.limit
        # Distinguish 401 (unauthenticated) from 403 (unauthorized)
        if isinstance(error, AuthorizationError) and error.code in UNAUTHENTICATED_CODES:
            return HTTPException(status_code=401, detail=detail)
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown RedFlagError subclasses
    return HTTPException(status_code=500, detail=detail)
