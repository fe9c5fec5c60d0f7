"""Management command to delete blobs that no record points to."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.core.files.storage import default_storage
from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.files.infrastructure.metadata import BLOB_NAMESPACE
from server.apps.files.models import File

_DEFAULT_PREFIX: Final = f'{BLOB_NAMESPACE}/'
_LOOKUP_BATCH_SIZE: Final = 500
_DEFAULT_MIN_AGE_SECONDS: Final = 3600

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete storage objects with no matching file record.

    Orphans appear when a blob delete fails during file deletion, or
    when the process dies between a blob write and its record.
    Blobs younger than ``--min-age`` are skipped: their upload may
    still be writing the record.
    """

    help = 'Delete blobs under a prefix that no file record references'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--prefix',
            default=_DEFAULT_PREFIX,
            help=f'Key prefix to scan (default: {_DEFAULT_PREFIX})',
        )
        parser.add_argument(
            '--min-age',
            type=int,
            default=_DEFAULT_MIN_AGE_SECONDS,
            help=(
                'Only delete blobs older than this many seconds '
                f'(default: {_DEFAULT_MIN_AGE_SECONDS})'
            ),
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        prefix = options['prefix']
        cutoff = timezone.now() - timedelta(seconds=options['min_age'])

        default_storage.ensure_configured()
        self.stdout.write(
            f'Scanning blobs under {prefix!r} written before {cutoff}',
        )

        orphans = []
        batch: list[str] = []
        for key in default_storage.iter_keys(
            prefix,
            modified_before=cutoff,
        ):
            batch.append(key)
            if len(batch) >= _LOOKUP_BATCH_SIZE:
                orphans.extend(_find_orphans(batch))
                batch = []
        orphans.extend(_find_orphans(batch))

        count = 0
        failed = 0

        for key in orphans:
            if dry_run:
                self.stdout.write(f'Would delete: {key}')
                count += 1
                continue

            try:
                default_storage.delete(key)
            except Exception as exc:
                self.stderr.write(f'Failed to delete {key}: {exc}')
                logger.exception('Failed to delete orphaned blob: %s', key)
                failed += 1
            else:
                count += 1
                logger.info('Deleted orphaned blob: %s', key)

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would delete {count} orphaned blobs'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Deleted {count} orphaned blobs, {failed} failed',
                ),
            )


def _find_orphans(keys: list[str]) -> list[str]:
    """Keys from the batch that no file record references."""
    if not keys:
        return []
    known = set(
        File.objects.filter(blob_key__in=keys).values_list(
            'blob_key',
            flat=True,
        ),
    )
    return [key for key in keys if key not in known]
