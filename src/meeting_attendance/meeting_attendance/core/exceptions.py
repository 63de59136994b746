class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the shared access key is wrong."""


class NotFoundError(DomainError):
    """Raised when a referenced person, meeting or record does not exist."""


class StoreError(Exception):
    """Raised when the backing store reports a failure."""


class ConflictError(StoreError):
    """Raised when a write violates a unique constraint in the store."""
