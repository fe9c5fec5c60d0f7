"""Metadata derivation utilities for files."""

import mimetypes
import uuid
from collections.abc import Iterable
from pathlib import PurePosixPath
from typing import Final

from server.apps.files.models import FileType

BLOB_NAMESPACE: Final = 'users'

_DEFAULT_CONTENT_TYPE: Final = 'application/octet-stream'
_SKIPPED_SEGMENTS: Final = frozenset(('', '.', '..'))

_DOCUMENT_MARKERS: Final = ('pdf', 'document', 'text')
_ARCHIVE_MARKERS: Final = ('zip', 'rar', 'tar')


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from filename.

    Uses Python's built-in mimetypes module to guess MIME type
    from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_CONTENT_TYPE
    return mime_type


def infer_file_type(content_type: str) -> FileType:
    """Map a content type onto a file category.

    Args:
        content_type: MIME type (e.g., 'image/png').

    Returns:
        Matching FileType, ``OTHER`` when nothing matches.
    """
    content_type = content_type.lower()
    if content_type.startswith('image/'):
        return FileType.IMAGE
    if content_type.startswith('video/'):
        return FileType.VIDEO
    if content_type.startswith('audio/'):
        return FileType.AUDIO
    if any(marker in content_type for marker in _DOCUMENT_MARKERS):
        return FileType.DOCUMENT
    if any(marker in content_type for marker in _ARCHIVE_MARKERS):
        return FileType.ARCHIVE
    return FileType.OTHER


def is_allowed_content_type(
    content_type: str,
    allowed_prefixes: Iterable[str],
) -> bool:
    """Check a content type against allowed prefixes.

    Args:
        content_type: MIME type of the upload.
        allowed_prefixes: Accepted prefixes (e.g., 'image/').

    Returns:
        True if the content type starts with any prefix.
    """
    content_type = content_type.lower()
    return any(content_type.startswith(prefix) for prefix in allowed_prefixes)


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = PurePosixPath(filename).suffix
    return extension.lstrip('.').lower()


def generate_filename(original_name: str) -> str:
    """Generate a collision-resistant name keeping the extension.

    Args:
        original_name: Name supplied by the uploader.

    Returns:
        Random hex name, e.g. '3f2a...9c.pdf'.
    """
    extension = get_file_extension(original_name)
    random_name = uuid.uuid4().hex
    if extension:
        return f'{random_name}.{extension}'
    return random_name


def normalize_folder(folder: str | None) -> str:
    """Folder value stored on the record.

    Args:
        folder: Folder supplied by the uploader.

    Returns:
        Trimmed folder, '/' when blank.
    """
    if folder is None or not folder.strip():
        return '/'
    return folder.strip()


def sanitize_folder(folder: str) -> str:
    """Folder component of a blob key.

    Leading and trailing slashes go away, and so do empty, '.' and
    '..' segments, so a folder can never climb out of its owner's
    namespace.

    Args:
        folder: Folder as stored on the record (e.g., '/docs/2024/').

    Returns:
        Relative folder path (e.g., 'docs/2024'), '' for the root.
    """
    segments = [
        segment.strip()
        for segment in folder.split('/')
    ]
    return '/'.join(
        segment for segment in segments
        if segment not in _SKIPPED_SEGMENTS
    )


def build_blob_key(namespace: str, folder: str, filename: str) -> str:
    """Build the object key for a file.

    Example: ('alice', '/docs/', 'a1b2.pdf') -> 'users/alice/docs/a1b2.pdf'

    Args:
        namespace: Owner namespace, the username.
        folder: Folder of the file.
        filename: Generated filename.

    Returns:
        Object key, deterministic for the same arguments.
    """
    folder_path = sanitize_folder(folder)
    parts = [BLOB_NAMESPACE, namespace]
    if folder_path:
        parts.append(folder_path)
    parts.append(filename)
    return '/'.join(parts)
