"""Fallback error views returning JSON instead of HTML pages."""

from django.http import HttpRequest, JsonResponse


def not_found(request: HttpRequest, exception: Exception) -> JsonResponse:
    """Respond to unknown routes."""
    return JsonResponse({'message': 'Route not found'}, status=404)


def server_error(request: HttpRequest) -> JsonResponse:
    """Respond to errors the middleware did not render."""
    return JsonResponse({'message': 'Server error'}, status=500)
