class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status the API layer answers with.
    """

    status_code = 500


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class InvalidOperationError(DomainError):
    """Raised when an endpoint receives an operation name it does not know."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when the session token (or login credentials) is missing or invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a booking or reservation overlaps an existing one."""

    status_code = 409


class StoreError(DomainError):
    """Raised when the database fails; carries the driver message."""

    status_code = 500
