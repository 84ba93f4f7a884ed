class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500
    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when there is no valid session or login credentials are invalid."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    code = "AUTHORIZATION_ERROR"


class NotFoundError(DomainError):
    """Raised when an entity id does not resolve."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised on duplicate email/workId or a second daily record for the same day."""

    status_code = 409
    code = "CONFLICT"
