"""Bearer token guard for API views."""

import functools
from collections.abc import Callable
from typing import Any

from django.http import HttpRequest, HttpResponse

from server.apps.accounts.logic.token_operations import (
    extract_bearer_token,
    verify_access_token,
)

_View = Callable[..., HttpResponse]


def bearer_required(view: _View) -> _View:
    """Reject requests without a valid access token.

    On success the caller's ``Identity`` is attached to the request
    as ``request.identity``. Errors propagate to
    ``ServiceErrorMiddleware`` which renders them.

    Args:
        view: View function to protect.

    Returns:
        Wrapped view.
    """

    @functools.wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        token = extract_bearer_token(request.headers.get('Authorization'))
        request.identity = verify_access_token(token)  # type: ignore[attr-defined]
        return view(request, *args, **kwargs)

    return wrapper
