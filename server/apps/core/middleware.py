"""Middleware rendering service errors as JSON responses."""

import logging
from collections.abc import Callable

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.core.exceptions import ServiceError

logger = logging.getLogger(__name__)

_SERVER_ERROR = 500


class ServiceErrorMiddleware:
    """Turn exceptions escaping a view into ``{"message": ...}`` bodies.

    ``ServiceError`` subclasses keep their own status and message,
    Django's ``ValidationError`` becomes a 400. Anything else is a 500
    whose internal text is only exposed when ``DEBUG`` is on.
    """

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
    ) -> None:
        """Initialize the middleware.

        Args:
            get_response: Next handler in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Pass the request through unchanged."""
        return self.get_response(request)

    def process_exception(
        self,
        request: HttpRequest,
        exception: Exception,
    ) -> HttpResponse | None:
        """Render a JSON error response for the exception.

        Args:
            request: Request being processed.
            exception: Exception raised by the view.

        Returns:
            JSON response with the mapped status code.
        """
        if isinstance(exception, ServiceError):
            if exception.status_code >= _SERVER_ERROR:
                logger.exception(
                    'Request failed: %s %s',
                    request.method,
                    request.path,
                )
            return JsonResponse(
                {'message': exception.message},
                status=exception.status_code,
            )

        if isinstance(exception, ValidationError):
            return JsonResponse(
                {'message': ' '.join(exception.messages)},
                status=400,
            )

        logger.exception(
            'Unhandled error: %s %s',
            request.method,
            request.path,
        )
        body = {'message': 'Server error'}
        if settings.DEBUG:
            body['error'] = str(exception)
        return JsonResponse(body, status=_SERVER_ERROR)
