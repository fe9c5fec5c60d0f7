"""Shared fixtures for files app tests."""

import uuid

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.models import File, FileType


@pytest.fixture
def make_upload():
    """Factory for uploaded files.

    Returns:
        Callable building a SimpleUploadedFile.
    """

    def factory(
        name='notes.txt',
        content=b'0123456789',
        content_type='text/plain',
    ):
        return SimpleUploadedFile(name, content, content_type=content_type)

    return factory


@pytest.fixture
def make_file():
    """Factory for file records without a stored blob.

    Returns:
        Callable creating a File for the given user.
    """

    def factory(owner, folder='/', file_type=FileType.DOCUMENT, **kwargs):
        filename = f'{uuid.uuid4().hex}.txt'
        defaults = {
            'filename': filename,
            'original_name': 'notes.txt',
            'size_bytes': 10,
            'blob_key': f'users/{owner.username}/{filename}',
            'content_type': 'text/plain',
            'file_type': file_type,
            'folder': folder,
        }
        defaults.update(kwargs)
        return File.objects.create(user=owner, **defaults)

    return factory
