"""Exceptions for files app."""

from server.apps.core.exceptions import ServiceError


class StorageError(ServiceError):
    """Raised when the blob backend or the metadata store fails."""

    status_code = 500
    default_message = 'Storage operation failed'


class UploadRejectedError(Exception):
    """Raised when a single upload fails validation.

    Only used inside batch uploads, where it marks one file as failed
    without stopping the others.
    """

    def __init__(self, original_name: str, reason: str) -> None:
        """Initialize UploadRejectedError.

        Args:
            original_name: Name of the rejected upload.
            reason: Why it was rejected.
        """
        self.original_name = original_name
        self.reason = reason
        super().__init__(f'{original_name}: {reason}')
