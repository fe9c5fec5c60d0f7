"""Django storage configuration for the S3 blob backend.

User files live in an S3 bucket (or any S3-compatible service such as
MinIO) and are written through django-storages' S3Storage. Credentials
default to empty so the process can start without them; uploads and
downloads refuse to run until they are set.
"""

from typing import Any, Final

from server.settings.components import config

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'bucket_name': config('AWS_S3_BUCKET', default=''),
            'access_key': config('AWS_ACCESS_KEY_ID', default=''),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=''),
            'region_name': config('AWS_REGION', default=''),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'file_overwrite': False,  # Prevent accidental overwrites
            'default_acl': 'private',
            'querystring_auth': True,  # Signed download URLs
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

# Upload limits, enforced per file
FILE_UPLOAD_MAX_BYTES = config(
    'FILE_UPLOAD_MAX_BYTES',
    cast=int,
    default=100 * 1024 * 1024,
)
FILE_UPLOAD_MAX_COUNT = config('FILE_UPLOAD_MAX_COUNT', cast=int, default=10)

# Content type prefixes accepted for upload
ALLOWED_UPLOAD_CONTENT_TYPES: Final = (
    'image/',
    'video/',
    'audio/',
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument',
    'text/',
    'application/zip',
    'application/x-rar-compressed',
    'application/json',
    'application/xml',
)

# Lifetime of signed download URLs, in seconds
DOWNLOAD_URL_EXPIRES = config('DOWNLOAD_URL_EXPIRES', cast=int, default=3600)
