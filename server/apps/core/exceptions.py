"""Service errors shared across apps.

Each error carries the HTTP status it maps to at the request
boundary. Input validation uses Django's own ``ValidationError``.
"""

from typing import ClassVar


class ServiceError(Exception):
    """Base class for errors rendered to API clients."""

    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = 'Server error'

    def __init__(self, message: str | None = None) -> None:
        """Initialize ServiceError.

        Args:
            message: Client-safe message, defaults to ``default_message``.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """Raised when a record is absent or not owned by the caller."""

    status_code = 404
    default_message = 'Not found'


class ConfigError(ServiceError):
    """Raised when a required secret or backend setting is missing."""

    status_code = 500
    default_message = 'Server is not configured'
