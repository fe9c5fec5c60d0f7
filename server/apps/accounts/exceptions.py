"""Exceptions for accounts app."""

from server.apps.core.exceptions import ServiceError


class AuthError(ServiceError):
    """Raised when credentials are missing or wrong.

    Messages stay generic so callers cannot tell which part of the
    credentials was wrong.
    """

    status_code = 401
    default_message = 'Authentication required'


class InvalidTokenError(AuthError):
    """Raised when a presented token fails signature or expiry checks."""

    status_code = 403
    default_message = 'Invalid or expired token'


class ConflictError(ServiceError):
    """Raised when a unique user field is already taken."""

    status_code = 409

    def __init__(self, field: str) -> None:
        """Initialize ConflictError.

        Args:
            field: Name of the colliding field (``email`` or ``username``).
        """
        self.field = field
        super().__init__(f'{field.capitalize()} already exists')
