"""Business logic for file operations.

Every operation is scoped to the calling identity: records owned by
someone else behave exactly like missing ones.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.db.models import QuerySet

from server.apps.accounts.logic.token_operations import Identity
from server.apps.core.exceptions import NotFoundError
from server.apps.files.exceptions import StorageError, UploadRejectedError
from server.apps.files.infrastructure.metadata import (
    build_blob_key,
    detect_mime_type,
    generate_filename,
    infer_file_type,
    is_allowed_content_type,
    normalize_folder,
)
from server.apps.files.models import File

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE: Final = 20
MAX_PAGE_SIZE: Final = 100

_FILE_NOT_FOUND: Final = 'File not found'


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Result of one file in a batch upload."""

    original_name: str
    record: File | None = None
    error: str = ''
    rejected: bool = False

    @property
    def succeeded(self) -> bool:
        """Whether the file was stored and recorded."""
        return self.record is not None


@dataclass(frozen=True, slots=True)
class BatchUploadResult:
    """Per-file outcomes of a batch upload, in upload order."""

    outcomes: tuple[UploadOutcome, ...]

    @property
    def uploaded(self) -> list[File]:
        """Records created by the batch."""
        return [
            outcome.record
            for outcome in self.outcomes
            if outcome.record is not None
        ]

    @property
    def failed(self) -> list[UploadOutcome]:
        """Outcomes of files that were not stored."""
        return [
            outcome for outcome in self.outcomes if not outcome.succeeded
        ]

    @property
    def all_rejected(self) -> bool:
        """Whether nothing succeeded and every failure was a rejection."""
        return not self.uploaded and all(
            outcome.rejected for outcome in self.outcomes
        )


@dataclass(frozen=True, slots=True)
class FilePage:
    """One page of an owner's file listing."""

    files: list[File]
    page: int
    limit: int
    total: int = 0

    @property
    def total_pages(self) -> int:
        """Number of pages at this page size."""
        return math.ceil(self.total / self.limit)

    def pagination(self) -> dict[str, Any]:
        """Pagination block of the listing response."""
        return {
            'page': self.page,
            'limit': self.limit,
            'totalFiles': self.total,
            'totalPages': self.total_pages,
            'hasNext': self.page < self.total_pages,
            'hasPrev': self.page > 1,
        }


@dataclass(frozen=True, slots=True)
class DownloadLink:
    """Time-limited link to a file's content."""

    url: str
    filename: str
    expires_in: int


def _get_storage() -> 'FileStorage':
    """Get the configured default storage backend.

    Returns:
        FileStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


def upload_files(
    identity: Identity,
    folder: str | None,
    uploads: Sequence[UploadedFile],
) -> BatchUploadResult:
    """Upload a batch of files, isolating per-file failures.

    Files are processed one after another. A failing file is logged
    and recorded as failed; the remaining files are still uploaded.
    The caller decides the response from whether anything succeeded.

    Args:
        identity: Owner of the files.
        folder: Target folder, '/' when blank.
        uploads: Uploaded files from the request.

    Returns:
        BatchUploadResult with one outcome per upload.

    Raises:
        ValidationError: If no files were given.
        ConfigError: If the blob backend is not configured.
    """
    if not uploads:
        raise ValidationError('No files uploaded')

    _get_storage().ensure_configured()
    folder = normalize_folder(folder)

    outcomes = []
    for upload in uploads:
        original_name = upload.name or ''
        try:
            record = upload_file(identity, folder, upload)
        except UploadRejectedError as error:
            logger.warning('Upload rejected: %s', error)
            outcomes.append(UploadOutcome(
                original_name=original_name,
                error=error.reason,
                rejected=True,
            ))
        except Exception:
            logger.exception('Error uploading file %s', original_name)
            outcomes.append(UploadOutcome(
                original_name=original_name,
                error='Upload failed',
            ))
        else:
            outcomes.append(UploadOutcome(
                original_name=original_name,
                record=record,
            ))

    result = BatchUploadResult(outcomes=tuple(outcomes))
    logger.info(
        'Batch upload for user %d: %d stored, %d failed',
        identity.id,
        len(result.uploaded),
        len(result.failed),
    )
    return result


def upload_file(
    identity: Identity,
    folder: str,
    upload: UploadedFile,
) -> File:
    """Upload one file to storage and create its record.

    Transaction safety: Upload to storage first, then create DB record.
    If DB transaction fails, the uploaded file is deleted from storage
    (rollback).

    Args:
        identity: Owner of the file.
        folder: Normalized target folder.
        upload: Uploaded file.

    Returns:
        Created File instance.

    Raises:
        UploadRejectedError: If the file is too large or of a
            disallowed type.
        StorageError: If the upload or the DB write fails.
    """
    original_name = (upload.name or '').strip()
    content_type = _resolve_content_type(upload, original_name)
    _validate_upload(upload, original_name, content_type)

    filename = generate_filename(original_name)
    blob_key = build_blob_key(identity.username, folder, filename)
    storage = _get_storage()

    # Step 1: Upload to storage first
    try:
        saved_name = storage.save(blob_key, upload)
    except Exception as error:
        raise StorageError(
            f'Failed to store {original_name}',
        ) from error

    # Step 2: Create database record (in transaction)
    try:
        with transaction.atomic():
            file_instance = File.objects.create(
                user_id=identity.id,
                filename=filename,
                original_name=original_name,
                size_bytes=upload.size,
                blob_key=saved_name,
                content_type=content_type,
                file_type=infer_file_type(content_type),
                folder=folder,
            )
    except Exception as error:
        logger.exception('File record for blob %s was not written', saved_name)
        storage.rollback_upload(saved_name)
        raise StorageError(
            f'Failed to record {original_name}',
        ) from error

    logger.info(
        'File record created in database: %s (ID: %d)',
        saved_name,
        file_instance.id,
    )
    return file_instance


def list_files(
    identity: Identity,
    folder: str | None = None,
    file_type: str | None = None,
    page: Any = 1,
    limit: Any = DEFAULT_PAGE_SIZE,
) -> FilePage:
    """List the caller's files, newest first.

    Blank filters are ignored rather than matched literally.

    Args:
        identity: Owner of the files.
        folder: Exact folder to filter on.
        file_type: File category to filter on.
        page: 1-based page number.
        limit: Page size, clamped to 1..100.

    Returns:
        FilePage with the requested slice and totals.

    Raises:
        ValidationError: If page or limit is not an integer.
    """
    page_number = max(_parse_int(page, 'page', 1), 1)
    page_size = min(
        max(_parse_int(limit, 'limit', DEFAULT_PAGE_SIZE), 1),
        MAX_PAGE_SIZE,
    )

    files = _owned_files(identity)
    if folder and folder.strip():
        files = files.filter(folder=folder.strip())
    if file_type and file_type.strip():
        files = files.filter(file_type=file_type.strip())

    total = files.count()
    offset = (page_number - 1) * page_size
    if offset >= total:
        # Pages past the end are empty without querying a huge OFFSET
        return FilePage(files=[], page=page_number, limit=page_size, total=total)

    return FilePage(
        files=list(files.order_by('-uploaded_at')[offset:offset + page_size]),
        page=page_number,
        limit=page_size,
        total=total,
    )


def get_file(identity: Identity, file_id: int) -> File:
    """Get one of the caller's files.

    Args:
        identity: Owner of the file.
        file_id: Record ID.

    Returns:
        File instance.

    Raises:
        NotFoundError: If the file does not exist or is not owned by
            the caller.
    """
    try:
        return _owned_files(identity).get(pk=file_id)
    except File.DoesNotExist as error:
        raise NotFoundError(_FILE_NOT_FOUND) from error


def get_download_link(identity: Identity, file_id: int) -> DownloadLink:
    """Create a time-limited download link for one of the caller's files.

    Args:
        identity: Owner of the file.
        file_id: Record ID.

    Returns:
        DownloadLink valid for ``DOWNLOAD_URL_EXPIRES`` seconds.

    Raises:
        NotFoundError: If the file is missing or not owned.
        ConfigError: If the blob backend is not configured.
    """
    file_instance = get_file(identity, file_id)
    storage = _get_storage()
    storage.ensure_configured()

    expires_in = settings.DOWNLOAD_URL_EXPIRES
    url = storage.signed_download_url(
        file_instance.blob_key,
        download_name=file_instance.original_name,
        expires_in=expires_in,
    )
    logger.info('Issued download link for file ID %d', file_instance.id)
    return DownloadLink(
        url=url,
        filename=file_instance.original_name,
        expires_in=expires_in,
    )


def delete_file(identity: Identity, file_id: int) -> str:
    """Delete one of the caller's files from storage and database.

    The blob is deleted first. If that fails the error is logged and
    the record is deleted anyway; the leftover object is an orphan for
    ``cleanup_orphaned_blobs``.

    Args:
        identity: Owner of the file.
        file_id: Record ID.

    Returns:
        Original name of the deleted file.

    Raises:
        NotFoundError: If the file is missing or not owned.
        StorageError: If the DB deletion fails.
    """
    file_instance = get_file(identity, file_id)
    blob_key = file_instance.blob_key

    logger.info('Deleting file: ID=%d, path=%s', file_id, blob_key)

    # Step 1: Delete from storage (best effort)
    try:
        _get_storage().delete(blob_key)
    except Exception:
        logger.exception(
            'Failed to delete file from storage (orphaned): %s',
            blob_key,
        )

    # Step 2: Delete from database
    try:
        with transaction.atomic():
            file_instance.delete()
    except Exception as error:
        logger.exception('Failed to delete file from database: ID=%d', file_id)
        raise StorageError('Failed to delete file record') from error

    logger.info('File record deleted from database: ID=%d', file_id)
    return file_instance.original_name


def list_folders(identity: Identity) -> list[str]:
    """List the distinct folders holding the caller's files.

    Args:
        identity: Owner of the files.

    Returns:
        Sorted folder names.
    """
    folders = (
        _owned_files(identity)
        .order_by()
        .values_list('folder', flat=True)
        .distinct()
    )
    return sorted(folders)


def _owned_files(identity: Identity) -> QuerySet[File]:
    """Files owned by the identity."""
    return File.objects.filter(user_id=identity.id)


def _resolve_content_type(upload: UploadedFile, original_name: str) -> str:
    """Client-declared content type, guessed from the name if absent."""
    content_type = (upload.content_type or '').split(';')[0].strip()
    return content_type or detect_mime_type(original_name)


def _validate_upload(
    upload: UploadedFile,
    original_name: str,
    content_type: str,
) -> None:
    """Check one upload against size and type limits.

    Raises:
        UploadRejectedError: If the upload breaks a limit.
    """
    if not original_name:
        raise UploadRejectedError(original_name, 'File name is required')

    max_bytes = settings.FILE_UPLOAD_MAX_BYTES
    if upload.size > max_bytes:
        raise UploadRejectedError(
            original_name,
            f'File exceeds the {max_bytes} byte limit',
        )

    if not is_allowed_content_type(
        content_type,
        settings.ALLOWED_UPLOAD_CONTENT_TYPES,
    ):
        raise UploadRejectedError(original_name, 'File type not allowed')


def _parse_int(raw_value: Any, name: str, default: int) -> int:
    """Parse a pagination parameter.

    Raises:
        ValidationError: If the value is not an integer.
    """
    if raw_value is None or raw_value == '':
        return default
    try:
        return int(raw_value)
    except (TypeError, ValueError) as error:
        raise ValidationError(f'{name} must be an integer') from error
