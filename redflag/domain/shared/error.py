"""Error hierarchy for the red-flag backend.

Error layers:
- RedFlagError: Base class for all errors raised by this package
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage/network issues (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class RedFlagError(Exception):
    """Base class for all red-flag errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(RedFlagError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class ConflictError(DomainError):
    """Resource already exists or version conflict."""


class AuthorizationError(DomainError):
    """User not authorized for this operation."""


class RateLimitExceededError(DomainError):
    """Daily ceiling for a rate-limited operation reached. Not retried automatically."""

    def __init__(self, message: str, limit: int, count: int) -> None:
        super().__init__(message, code="rate_limit_exceeded")
        self.limit = limit
        self.count = count


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(RedFlagError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend (database, object store) is unavailable."""


class ExternalServiceError(InfrastructureError):
    """External service is unavailable or failed."""


class BlobDeletionFailedError(ExternalServiceError):
    """Blob store refused or failed a deletion. The row stays eligible for the next sweep."""

    def __init__(self, storage_id: str, reason: str) -> None:
        super().__init__(f"Failed to delete blob {storage_id}: {reason}", code="blob_deletion_failed")
        self.storage_id = storage_id
        self.reason = reason


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
