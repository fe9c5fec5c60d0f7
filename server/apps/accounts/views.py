"""API views for registration and the session token lifecycle."""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from server.apps.accounts.decorators import bearer_required
from server.apps.accounts.logic import token_operations
from server.apps.core.http import parse_body


@csrf_exempt
@require_POST
def register(request: HttpRequest) -> JsonResponse:
    """Create an account."""
    payload = parse_body(request)
    user = token_operations.register_user(
        payload.get('username'),
        payload.get('email'),
        payload.get('password'),
    )
    return JsonResponse(
        {'message': 'User registered successfully', 'user': user.summary()},
        status=201,
    )


@csrf_exempt
@require_POST
def login(request: HttpRequest) -> JsonResponse:
    """Exchange email and password for a token pair."""
    payload = parse_body(request)
    result = token_operations.login(
        payload.get('email'),
        payload.get('password'),
    )
    return JsonResponse({
        'message': 'Login successful',
        'accessToken': result.access_token,
        'refreshToken': result.refresh_token,
        'user': result.user.summary(),
    })


@csrf_exempt
@require_POST
def refresh(request: HttpRequest) -> JsonResponse:
    """Mint a new access token from a refresh token."""
    payload = parse_body(request)
    access_token = token_operations.refresh_access_token(
        payload.get('refreshToken'),
    )
    return JsonResponse({'accessToken': access_token})


@csrf_exempt
@require_POST
@bearer_required
def logout(request: HttpRequest) -> JsonResponse:
    """Revoke the caller's refresh token."""
    token_operations.logout(request.identity)  # type: ignore[attr-defined]
    return JsonResponse({'message': 'Logout successful'})


@require_GET
@bearer_required
def me(request: HttpRequest) -> JsonResponse:
    """Return the caller's profile."""
    user = token_operations.get_profile(
        request.identity,  # type: ignore[attr-defined]
    )
    return JsonResponse({'user': user.summary()})
