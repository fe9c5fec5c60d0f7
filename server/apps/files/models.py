"""Database models for files app."""

from pathlib import Path
from typing import Any, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# Constants for field max lengths
_FILENAME_MAX_LENGTH: Final = 255
_BLOB_KEY_MAX_LENGTH: Final = 1024  # S3 object key limit
_CONTENT_TYPE_MAX_LENGTH: Final = 255
_FILE_TYPE_MAX_LENGTH: Final = 16
_FOLDER_MAX_LENGTH: Final = 512

ROOT_FOLDER: Final = '/'


class FileType(models.TextChoices):
    """Coarse category derived from a file's content type."""

    IMAGE = 'image', 'Image'
    DOCUMENT = 'document', 'Document'
    VIDEO = 'video', 'Video'
    AUDIO = 'audio', 'Audio'
    ARCHIVE = 'archive', 'Archive'
    OTHER = 'other', 'Other'


@final
class File(models.Model):
    """Metadata record of a blob stored in S3.

    Each record points at exactly one object through ``blob_key``
    ({namespace}/{username}/{folder}/{filename}). Records are created
    only after the object was written and are never edited afterwards.
    """

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    filename = models.CharField(
        max_length=_FILENAME_MAX_LENGTH,
        help_text='Generated name used in the blob key',
    )

    original_name = models.CharField(
        max_length=_FILENAME_MAX_LENGTH,
        help_text='Name supplied by the uploader, display only',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    blob_key = models.CharField(
        max_length=_BLOB_KEY_MAX_LENGTH,
        unique=True,
        help_text='Object key in the blob bucket, never exposed to clients',
    )

    content_type = models.CharField(
        max_length=_CONTENT_TYPE_MAX_LENGTH,
    )

    file_type = models.CharField(
        max_length=_FILE_TYPE_MAX_LENGTH,
        choices=FileType.choices,
        default=FileType.OTHER,
    )

    folder = models.CharField(
        max_length=_FOLDER_MAX_LENGTH,
        default=ROOT_FOLDER,
    )

    # Timestamps
    uploaded_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['-uploaded_at']

        indexes = [
            # Folder filter in listings
            models.Index(
                fields=['user', 'folder'],
                name='files_user_folder_idx',
            ),
            # File type filter in listings
            models.Index(
                fields=['user', 'file_type'],
                name='files_user_type_idx',
            ),
            # Optimize recent files queries
            models.Index(
                fields=['user', '-uploaded_at'],
                name='files_user_recent_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.original_name}'

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'report.PDF' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.original_name).suffix
        return extension.lstrip('.').lower()

    def summary(self) -> dict[str, Any]:
        """Client-facing representation.

        The blob key stays internal; clients reach the object only
        through signed download links.

        Returns:
            Dictionary of display fields.
        """
        return {
            'id': self.pk,
            'filename': self.filename,
            'originalName': self.original_name,
            'size': self.size_bytes,
            'contentType': self.content_type,
            'fileType': self.file_type,
            'folder': self.folder,
            'uploadTime': self.uploaded_at.isoformat(),
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.modified_at.isoformat(),
        }
