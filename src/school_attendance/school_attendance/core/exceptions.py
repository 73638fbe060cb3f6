class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a class, schedule or student required by a request is missing."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
