"""Shared fixtures for all tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.accounts.logic.token_operations import Identity, login

User = get_user_model()

TEST_BUCKET = 'file-custody'
TEST_PASSWORD = 'secret1'


@pytest.fixture(autouse=True)
def _service_settings(settings):
    """Configure signing secrets and the blob backend for every test."""
    settings.JWT_SECRET = 'test-access-secret'
    settings.JWT_REFRESH_SECRET = 'test-refresh-secret'
    settings.STORAGES = {
        'default': {
            'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
            'OPTIONS': {
                'bucket_name': TEST_BUCKET,
                'access_key': 'testing',
                'secret_key': 'testing',
                'region_name': 'us-east-1',
                'file_overwrite': False,
                'default_acl': 'private',
                'querystring_auth': True,
            },
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='alice',
        password=TEST_PASSWORD,
        email='alice@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='bob',
        password=TEST_PASSWORD,
        email='bob@example.com',
    )


@pytest.fixture
def identity(user):
    """Identity of the test user, as carried by access tokens."""
    return Identity.from_user(user)


@pytest.fixture
def other_identity(other_user):
    """Identity of the second test user."""
    return Identity.from_user(other_user)


@pytest.fixture
def auth_headers(user):
    """Authorization header for the test user.

    Returns:
        Extra keyword arguments for the Django test client.
    """
    tokens = login(user.email, TEST_PASSWORD)
    return {'HTTP_AUTHORIZATION': f'Bearer {tokens.access_token}'}


@pytest.fixture
def other_auth_headers(other_user):
    """Authorization header for the second test user."""
    tokens = login(other_user.email, TEST_PASSWORD)
    return {'HTTP_AUTHORIZATION': f'Bearer {tokens.access_token}'}


@pytest.fixture
def mock_s3():
    """Mock S3 service with the test bucket.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=TEST_BUCKET)

        yield conn


@pytest.fixture
def bucket(mock_s3):
    """The mocked test bucket."""
    return mock_s3.Bucket(TEST_BUCKET)
