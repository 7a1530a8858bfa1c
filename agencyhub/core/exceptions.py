"""
Custom Exceptions

The error kinds raised by the core. They subclass HTTPException so the
HTTP layer can render them directly, and each carries an error_type used
as the "type" field of the JSON error body.

ValidationError, NotFound, PermissionDenied and ConflictError are final.
TransactionAborted is retryable and only ever escapes the cascade
engine converted into a ConflictError.
"""
from fastapi import HTTPException, status


class AgencyHubError(HTTPException):
    """Base class for every error raised by the core."""

    error_type = "error"
    retryable = False

    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(AgencyHubError):
    """Missing or invalid field, or a reference that does not resolve in the agency."""

    error_type = "validation_error"

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


class NotFound(AgencyHubError):
    """
    Record is absent or belongs to another agency.

    The two cases are deliberately indistinguishable to the caller.
    """

    error_type = "not_found"

    def __init__(self, entity: str = "Record", identifier: str = ""):
        detail = f"{entity} not found: {identifier}" if identifier else f"{entity} not found"
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class PermissionDenied(AgencyHubError):
    """Capability check failed or tenant context is missing."""

    error_type = "permission_denied"

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class ConflictError(AgencyHubError):
    """Unique constraint violation, record still referenced, or an aborted cascade retry."""

    error_type = "conflict"

    def __init__(self, detail: str = "Conflict"):
        super().__init__(status.HTTP_409_CONFLICT, detail)


class TransactionAborted(AgencyHubError):
    """Concurrent modification detected during a cascade."""

    error_type = "transaction_aborted"
    retryable = True

    def __init__(self, detail: str = "Concurrent modification detected"):
        super().__init__(status.HTTP_409_CONFLICT, detail)


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
