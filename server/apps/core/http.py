"""Helpers for reading API request bodies."""

import json
from typing import Any

from django.core.exceptions import ValidationError
from django.http import HttpRequest


def parse_body(request: HttpRequest) -> dict[str, Any]:
    """Read a JSON or form-encoded request body.

    Args:
        request: Incoming request.

    Returns:
        Body fields as a dictionary (empty for an empty body).

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    if request.content_type != 'application/json':
        return request.POST.dict()

    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ValidationError('Malformed JSON body') from error

    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload
