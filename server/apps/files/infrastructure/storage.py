"""Custom storage backend for S3-compatible storage."""

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import Any, final, override

from django.utils.http import content_disposition_header
from storages.backends.s3 import S3Storage

from server.apps.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

_REQUIRED_OPTIONS = (
    'bucket_name',
    'region_name',
    'access_key',
    'secret_key',
)


@final
class FileStorage(S3Storage):
    """Custom S3 storage backend for user files.

    Extends django-storages S3Storage with:
    - Configuration check before any blob operation
    - Rollback of uploads whose metadata could not be written
    - Signed download links forcing an attachment filename
    - Listing keys by age for orphan cleanup
    """

    def ensure_configured(self) -> None:
        """Refuse blob operations while settings are incomplete.

        Raises:
            ConfigError: If bucket, region or credentials are missing.
        """
        missing = [
            option for option in _REQUIRED_OPTIONS
            if not getattr(self, option, None)
        ]
        if missing:
            logger.error(
                'Blob storage is not configured, missing: %s',
                ', '.join(missing),
            )
            raise ConfigError('Blob storage configuration is incomplete')

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Write a user's blob under its generated key.

        Keys are unique per upload, so the stored name normally equals
        ``name``; S3Storage only alters it on a key collision.

        Args:
            name: Blob key built from owner, folder and generated name.
            content: Uploaded file.
            max_length: Optional maximum length for the key.

        Returns:
            Key the blob was stored under.
        """
        size = getattr(content, 'size', None)
        logger.debug('Storing blob %s (%s bytes)', name, size)
        try:
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Blob write failed: %s', name)
            raise
        if saved_name != name:
            logger.warning('Blob key %s was stored as %s', name, saved_name)
        logger.info('Stored blob %s', saved_name)
        return saved_name

    @override
    def delete(self, name: str) -> None:
        """Remove a blob.

        Deleting a key that is already gone succeeds, so a retried file
        deletion never fails on the blob side.

        Args:
            name: Blob key.
        """
        try:
            super().delete(name)
        except Exception:
            logger.exception('Blob delete failed: %s', name)
            raise
        logger.info('Deleted blob %s', name)

    def rollback_upload(self, name: str) -> bool:
        """Remove a blob whose file record could not be written.

        Never raises: the caller is already reporting the metadata
        failure. A blob left behind is picked up by
        ``cleanup_orphaned_blobs``.

        Args:
            name: Blob key of the unrecorded upload.

        Returns:
            True if the blob was removed.
        """
        try:
            self.delete(name)
        except Exception:
            logger.exception('Rollback left orphaned blob %s', name)
            return False
        logger.warning('Rolled back unrecorded blob %s', name)
        return True

    def signed_download_url(
        self,
        name: str,
        download_name: str,
        expires_in: int,
    ) -> str:
        """Create a presigned GET URL that downloads as an attachment.

        Args:
            name: Storage path of the object.
            download_name: Filename offered to the browser.
            expires_in: URL lifetime in seconds.

        Returns:
            Presigned URL.
        """
        disposition = content_disposition_header(
            as_attachment=True,
            filename=download_name,
        )
        return self.url(
            name,
            parameters={'ResponseContentDisposition': disposition},
            expire=expires_in,
        )

    def iter_keys(
        self,
        prefix: str,
        modified_before: datetime | None = None,
    ) -> Iterator[str]:
        """Iterate over object keys under a prefix.

        Args:
            prefix: Key prefix (e.g., 'users/').
            modified_before: Only yield objects last written at or
                before this moment.

        Yields:
            Object keys, paginated transparently by boto3.
        """
        for summary in self.bucket.objects.filter(Prefix=prefix):
            if modified_before and summary.last_modified > modified_before:
                continue
            yield summary.key
