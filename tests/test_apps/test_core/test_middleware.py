"""Tests for JSON error rendering."""

import json

import pytest
from django.core.exceptions import ValidationError
from django.http import HttpResponse

from server.apps.accounts.exceptions import ConflictError, InvalidTokenError
from server.apps.core.exceptions import ConfigError, NotFoundError
from server.apps.core.middleware import ServiceErrorMiddleware


@pytest.fixture
def middleware():
    """Middleware wrapping a no-op view."""
    return ServiceErrorMiddleware(lambda request: HttpResponse())


def _render(middleware, rf, exception):
    response = middleware.process_exception(rf.get('/files'), exception)
    return response.status_code, json.loads(response.content)


@pytest.mark.parametrize(('exception', 'status', 'message'), [
    (NotFoundError('File not found'), 404, 'File not found'),
    (ConflictError('username'), 409, 'Username already exists'),
    (InvalidTokenError(), 403, 'Invalid or expired token'),
    (ConfigError('JWT secret not configured'), 500, 'JWT secret not configured'),
])
def test_service_errors(middleware, rf, exception, status, message):
    """Test service errors keep their status and message."""
    assert _render(middleware, rf, exception) == (status, {'message': message})


def test_validation_error(middleware, rf):
    """Test validation errors become a 400."""
    status, body = _render(middleware, rf, ValidationError('Bad input'))

    assert status == 400
    assert body == {'message': 'Bad input'}


def test_unexpected_error_hides_details(middleware, rf, settings):
    """Test internal error text stays hidden outside debug mode."""
    settings.DEBUG = False

    status, body = _render(middleware, rf, RuntimeError('db password wrong'))

    assert status == 500
    assert body == {'message': 'Server error'}


def test_unexpected_error_in_debug(middleware, rf, settings):
    """Test debug mode includes the error text."""
    settings.DEBUG = True

    status, body = _render(middleware, rf, RuntimeError('boom'))

    assert status == 500
    assert body == {'message': 'Server error', 'error': 'boom'}


def test_passes_responses_through(middleware, rf):
    """Test successful responses are untouched."""
    assert middleware(rf.get('/')).status_code == 200
