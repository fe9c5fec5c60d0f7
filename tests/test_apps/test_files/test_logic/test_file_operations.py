"""Tests for file operations business logic."""

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from server.apps.core.exceptions import ConfigError, NotFoundError
from server.apps.files.exceptions import StorageError
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.file_operations import (
    delete_file,
    get_download_link,
    get_file,
    list_files,
    list_folders,
    upload_file,
    upload_files,
)
from server.apps.files.models import File, FileType


def _keys(bucket):
    return [summary.key for summary in bucket.objects.all()]


@pytest.mark.django_db
class TestUpload:
    """Tests for single and batch uploads."""

    def test_upload_single_file(self, identity, mock_s3, bucket, make_upload):
        """Test upload stores the blob and creates the record."""
        result = upload_files(identity, 'docs', [make_upload()])

        assert len(result.uploaded) == 1
        assert result.failed == []

        record = result.uploaded[0]
        assert record.user_id == identity.id
        assert record.original_name == 'notes.txt'
        assert record.size_bytes == 10
        assert record.content_type == 'text/plain'
        assert record.file_type == FileType.DOCUMENT
        assert record.folder == 'docs'
        assert record.filename.endswith('.txt')
        assert record.blob_key == f'users/alice/docs/{record.filename}'
        assert _keys(bucket) == [record.blob_key]
        body = bucket.Object(record.blob_key).get()['Body'].read()
        assert body == b'0123456789'

    def test_upload_root_folder(self, identity, mock_s3, make_upload):
        """Test blank folder stores the file in the root."""
        result = upload_files(identity, '  ', [make_upload()])

        record = result.uploaded[0]
        assert record.folder == '/'
        assert record.blob_key == f'users/alice/{record.filename}'

    def test_upload_folder_cannot_escape(self, identity, mock_s3, make_upload):
        """Test parent segments are dropped from the blob key."""
        result = upload_files(identity, '../../bob', [make_upload()])

        record = result.uploaded[0]
        assert record.folder == '../../bob'
        assert record.blob_key == f'users/alice/bob/{record.filename}'

    def test_upload_detects_missing_content_type(
        self,
        identity,
        mock_s3,
        make_upload,
    ):
        """Test content type is guessed from the name when not sent."""
        upload = make_upload(name='photo.png', content_type='')

        record = upload_files(identity, None, [upload]).uploaded[0]

        assert record.content_type == 'image/png'
        assert record.file_type == FileType.IMAGE

    def test_upload_partial_failure(self, identity, mock_s3, make_upload):
        """Test a rejected file does not stop the others."""
        uploads = [
            make_upload(name='a.txt'),
            make_upload(
                name='virus.exe',
                content_type='application/x-msdownload',
            ),
            make_upload(name='b.pdf', content_type='application/pdf'),
        ]

        result = upload_files(identity, '/', uploads)

        assert [record.original_name for record in result.uploaded] == [
            'a.txt',
            'b.pdf',
        ]
        assert len(result.failed) == 1
        assert result.failed[0].original_name == 'virus.exe'
        assert result.failed[0].error == 'File type not allowed'
        assert result.failed[0].rejected
        assert not result.all_rejected
        assert File.objects.count() == 2

    def test_upload_oversized(self, identity, mock_s3, bucket, make_upload, settings):
        """Test files above the size limit are rejected."""
        settings.FILE_UPLOAD_MAX_BYTES = 5

        result = upload_files(identity, '/', [make_upload()])

        assert result.uploaded == []
        assert result.all_rejected
        assert 'limit' in result.failed[0].error
        assert _keys(bucket) == []

    def test_upload_all_rejected(self, identity, mock_s3, make_upload):
        """Test a batch where every file is rejected."""
        uploads = [
            make_upload(name='a.exe', content_type='application/x-msdownload'),
            make_upload(name='b.exe', content_type='application/x-msdownload'),
        ]

        result = upload_files(identity, '/', uploads)

        assert result.uploaded == []
        assert len(result.failed) == 2
        assert result.all_rejected
        assert not File.objects.exists()

    def test_upload_storage_failure(
        self,
        identity,
        mock_s3,
        make_upload,
        monkeypatch,
    ):
        """Test a failed blob write leaves no record."""

        def broken_save(self, name, content, max_length=None):
            raise OSError('bucket unavailable')

        monkeypatch.setattr(FileStorage, 'save', broken_save)

        result = upload_files(identity, '/', [make_upload()])

        assert result.uploaded == []
        assert result.failed[0].error == 'Upload failed'
        assert not result.all_rejected
        assert not File.objects.exists()

    def test_upload_metadata_failure_rolls_back(
        self,
        identity,
        mock_s3,
        bucket,
        make_upload,
        monkeypatch,
    ):
        """Test the blob is removed when the record cannot be written."""

        def broken_create(**kwargs):
            raise RuntimeError('database unavailable')

        monkeypatch.setattr(File.objects, 'create', broken_create)

        with pytest.raises(StorageError):
            upload_file(identity, '/', make_upload())

        assert _keys(bucket) == []

    def test_upload_no_files(self, identity):
        """Test an empty batch is a validation error."""
        with pytest.raises(ValidationError, match='No files uploaded'):
            upload_files(identity, '/', [])

    def test_upload_storage_not_configured(
        self,
        identity,
        make_upload,
        settings,
    ):
        """Test uploads refuse to run without blob settings."""
        storages = dict(settings.STORAGES)
        storages['default'] = {
            'BACKEND': storages['default']['BACKEND'],
            'OPTIONS': {'bucket_name': '', 'region_name': 'us-east-1'},
        }
        settings.STORAGES = storages

        with pytest.raises(ConfigError):
            upload_files(identity, '/', [make_upload()])

        assert not File.objects.exists()


@pytest.mark.django_db
class TestListFiles:
    """Tests for paginated listings."""

    def test_list_only_own_files(self, identity, user, other_user, make_file):
        """Test listings never include another user's files."""
        own = make_file(user)
        make_file(other_user)

        page = list_files(identity)

        assert page.files == [own]
        assert page.total == 1

    def test_list_empty_filters_ignored(self, identity, user, make_file):
        """Test blank filters behave like no filters."""
        make_file(user, folder='docs')
        make_file(user, folder='/')

        unfiltered = list_files(identity)
        blank = list_files(identity, folder='', file_type='  ')

        assert blank.total == unfiltered.total == 2
        assert [record.pk for record in blank.files] == [
            record.pk for record in unfiltered.files
        ]

    def test_list_filter_trims_values(self, identity, user, make_file):
        """Test filter values are trimmed like stored folders."""
        in_docs = make_file(user, folder='docs', file_type=FileType.IMAGE)
        make_file(user, folder='/')

        assert list_files(identity, folder=' docs ').files == [in_docs]
        assert list_files(identity, file_type=' image ').files == [in_docs]

    def test_list_page_past_end(self, identity, user, make_file):
        """Test pages beyond the last one are empty."""
        make_file(user)

        page = list_files(identity, page=10 ** 30)

        assert page.files == []
        assert page.total == 1
        assert page.pagination()['hasNext'] is False

    def test_list_filter_folder(self, identity, user, make_file):
        """Test folder filter matches exactly."""
        in_docs = make_file(user, folder='docs')
        make_file(user, folder='docs/2024')

        page = list_files(identity, folder='docs')

        assert page.files == [in_docs]

    def test_list_filter_file_type(self, identity, user, make_file):
        """Test file type filter."""
        image = make_file(user, file_type=FileType.IMAGE)
        make_file(user, file_type=FileType.DOCUMENT)

        page = list_files(identity, file_type='image')

        assert page.files == [image]

    def test_list_newest_first(self, identity, user, make_file):
        """Test files are ordered by upload time, newest first."""
        now = timezone.now()
        old = make_file(user, uploaded_at=now - timedelta(days=2))
        new = make_file(user, uploaded_at=now)
        middle = make_file(user, uploaded_at=now - timedelta(days=1))

        page = list_files(identity)

        assert page.files == [new, middle, old]

    def test_list_pagination(self, identity, user, make_file):
        """Test page slicing and totals."""
        now = timezone.now()
        records = [
            make_file(user, uploaded_at=now - timedelta(minutes=index))
            for index in range(5)
        ]

        page = list_files(identity, page='2', limit='2')

        assert page.files == records[2:4]
        assert page.pagination() == {
            'page': 2,
            'limit': 2,
            'totalFiles': 5,
            'totalPages': 3,
            'hasNext': True,
            'hasPrev': True,
        }

    def test_list_empty(self, identity):
        """Test an empty listing has zero pages."""
        page = list_files(identity)

        assert page.files == []
        assert page.pagination() == {
            'page': 1,
            'limit': 20,
            'totalFiles': 0,
            'totalPages': 0,
            'hasNext': False,
            'hasPrev': False,
        }

    def test_list_limit_clamped(self, identity):
        """Test page size stays within 1..100."""
        assert list_files(identity, limit=1000).limit == 100
        assert list_files(identity, limit=0).limit == 1
        assert list_files(identity, page=-3).page == 1

    def test_list_invalid_page(self, identity):
        """Test non-numeric page is a validation error."""
        with pytest.raises(ValidationError):
            list_files(identity, page='abc')


@pytest.mark.django_db
class TestSingleFile:
    """Tests for lookups, downloads and deletes."""

    def test_get_file(self, identity, user, make_file):
        """Test owner can fetch a file."""
        record = make_file(user)

        assert get_file(identity, record.pk) == record

    def test_get_missing_file(self, identity):
        """Test unknown ID is not found."""
        with pytest.raises(NotFoundError):
            get_file(identity, 99999)

    def test_get_other_users_file(self, identity, other_user, make_file):
        """Test another user's file looks missing."""
        record = make_file(other_user)

        with pytest.raises(NotFoundError, match='File not found'):
            get_file(identity, record.pk)

    def test_download_link(self, identity, user, mock_s3, make_file):
        """Test download link carries the original name and lifetime."""
        record = make_file(user, original_name='Report.pdf')

        link = get_download_link(identity, record.pk)

        assert record.blob_key in link.url
        assert link.filename == 'Report.pdf'
        assert link.expires_in == 3600

    def test_download_other_users_file(
        self,
        identity,
        other_user,
        mock_s3,
        make_file,
    ):
        """Test no link is issued for another user's file."""
        record = make_file(other_user)

        with pytest.raises(NotFoundError):
            get_download_link(identity, record.pk)

    def test_delete_file(self, identity, mock_s3, bucket, make_upload):
        """Test delete removes the blob and the record."""
        record = upload_files(identity, '/', [make_upload()]).uploaded[0]

        filename = delete_file(identity, record.pk)

        assert filename == 'notes.txt'
        assert not File.objects.filter(pk=record.pk).exists()
        assert _keys(bucket) == []

    def test_delete_tolerates_blob_failure(
        self,
        identity,
        mock_s3,
        bucket,
        make_upload,
        monkeypatch,
    ):
        """Test the record is removed even if the blob delete fails."""
        record = upload_files(identity, '/', [make_upload()]).uploaded[0]

        def broken_delete(self, name):
            raise OSError('bucket unavailable')

        monkeypatch.setattr(FileStorage, 'delete', broken_delete)

        delete_file(identity, record.pk)

        assert not File.objects.filter(pk=record.pk).exists()
        assert _keys(bucket) == [record.blob_key]

    def test_delete_other_users_file(
        self,
        identity,
        other_user,
        mock_s3,
        make_file,
    ):
        """Test another user's file cannot be deleted."""
        record = make_file(other_user)

        with pytest.raises(NotFoundError):
            delete_file(identity, record.pk)

        assert File.objects.filter(pk=record.pk).exists()


@pytest.mark.django_db
def test_list_folders(identity, user, other_user, make_file):
    """Test distinct folders of the caller, sorted."""
    make_file(user, folder='work')
    make_file(user, folder='/')
    make_file(user, folder='work')
    make_file(other_user, folder='secret')

    assert list_folders(identity) == ['/', 'work']


@pytest.mark.django_db
def test_list_folders_empty(identity):
    """Test a user without files has no folders."""
    assert list_folders(identity) == []
