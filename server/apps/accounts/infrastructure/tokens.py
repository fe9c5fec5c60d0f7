"""JWT encoding and decoding for credential tokens."""

import secrets
from datetime import timedelta
from typing import Any, Final

from django.utils import timezone
from jose import JWTError, jwt

from server.apps.accounts.exceptions import InvalidTokenError

ACCESS_TOKEN_TYPE: Final = 'access'
REFRESH_TOKEN_TYPE: Final = 'refresh'

_TOKEN_ID_BYTES: Final = 16


def encode_token(
    claims: dict[str, Any],
    secret: str,
    algorithm: str,
    lifetime: timedelta,
    token_type: str,
) -> str:
    """Sign a time-bounded token over the given claims.

    Adds ``type``, ``iat``, ``exp`` and a random ``jti`` so tokens
    issued within the same second are still distinct.

    Args:
        claims: Identity claims to embed.
        secret: Signing secret.
        algorithm: JWT algorithm name (e.g. 'HS256').
        lifetime: How long the token stays valid.
        token_type: ``access`` or ``refresh``.

    Returns:
        Encoded JWT string.
    """
    issued_at = timezone.now()
    to_encode = {
        **claims,
        'type': token_type,
        'iat': issued_at,
        'exp': issued_at + lifetime,
        'jti': secrets.token_hex(_TOKEN_ID_BYTES),
    }
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    algorithm: str,
    token_type: str,
) -> dict[str, Any]:
    """Verify signature, expiry and type of a token.

    Args:
        token: Encoded JWT.
        secret: Secret the token must be signed with.
        algorithm: Accepted JWT algorithm.
        token_type: Expected ``type`` claim.

    Returns:
        Decoded claims.

    Raises:
        InvalidTokenError: If the token is malformed, forged, expired
            or of another type.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as error:
        raise InvalidTokenError() from error

    if payload.get('type') != token_type:
        raise InvalidTokenError()
    return payload
