"""Business logic for the credential token lifecycle.

Registration, login, access token verification, refresh and logout.
Access tokens are stateless; the only token state kept server-side is
the refresh token stored on the user, which makes logout and a second
login revoke earlier refresh tokens.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final, Self

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from server.apps.accounts.exceptions import (
    AuthError,
    ConflictError,
    InvalidTokenError,
)
from server.apps.accounts.infrastructure.tokens import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    decode_token,
    encode_token,
)
from server.apps.accounts.models import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    User,
)
from server.apps.core.exceptions import ConfigError, NotFoundError

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH: Final = 6

_BEARER_PREFIX: Final = 'bearer'
_INVALID_CREDENTIALS: Final = 'Invalid credentials'


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """Snapshot of the signing configuration."""

    access_secret: str
    refresh_secret: str
    algorithm: str
    access_lifetime: timedelta
    refresh_lifetime: timedelta

    @classmethod
    def from_settings(cls) -> Self:
        """Build from Django settings.

        Returns:
            TokenSettings with the configured secrets and lifetimes.
        """
        return cls(
            access_secret=settings.JWT_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_lifetime=timedelta(seconds=settings.ACCESS_TOKEN_LIFETIME),
            refresh_lifetime=timedelta(
                seconds=settings.REFRESH_TOKEN_LIFETIME,
            ),
        )

    def require_access_secret(self) -> str:
        """Return the access secret or refuse to continue.

        Raises:
            ConfigError: If the access secret is not set.
        """
        if not self.access_secret:
            raise ConfigError('JWT secret not configured')
        return self.access_secret

    def require_secrets(self) -> None:
        """Refuse to continue unless both secrets are set.

        Raises:
            ConfigError: If either secret is not set.
        """
        if not self.access_secret or not self.refresh_secret:
            raise ConfigError('JWT secrets not configured')


@dataclass(frozen=True, slots=True)
class Identity:
    """Claims of an authenticated caller, taken from an access token."""

    id: int
    email: str
    username: str

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Self:
        """Build from decoded token claims.

        Raises:
            InvalidTokenError: If identity claims are missing.
        """
        try:
            return cls(
                id=int(claims['id']),
                email=claims['email'],
                username=claims['username'],
            )
        except (KeyError, TypeError, ValueError) as error:
            raise InvalidTokenError() from error

    @classmethod
    def from_user(cls, user: User) -> Self:
        """Build from a user record."""
        return cls(id=user.pk, email=user.email, username=user.username)

    def claims(self) -> dict[str, Any]:
        """Claims signed into both tokens."""
        return {'id': self.id, 'email': self.email, 'username': self.username}


@dataclass(frozen=True, slots=True)
class LoginResult:
    """Token pair issued by a successful login."""

    access_token: str
    refresh_token: str
    user: User


def register_user(
    username: str | None,
    email: str | None,
    password: str | None,
) -> User:
    """Create a new user with a hashed password.

    Args:
        username: Desired username, 3 to 30 characters.
        email: Email address, stored lower-cased.
        password: Raw password, at least 6 characters.

    Returns:
        Created User instance.

    Raises:
        ValidationError: If a field is missing or malformed.
        ConflictError: If the email or username is already taken.
    """
    if not username or not email or not password:
        raise ValidationError('All fields are required')
    _require_strings(username, email, password)

    username = username.strip()
    email = email.strip().lower()

    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f'Password must be at least {PASSWORD_MIN_LENGTH} '
            'characters long',
        )
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f'Username must be between {USERNAME_MIN_LENGTH} and '
            f'{USERNAME_MAX_LENGTH} characters long',
        )
    User._meta.get_field('username').run_validators(username)  # noqa: SLF001
    validate_email(email)

    _check_unique(username, email)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                email=email,
                password=password,
            )
    except IntegrityError:
        # Lost a race with a concurrent registration
        _check_unique(username, email)
        raise

    logger.info('User registered: %s (ID: %d)', user.username, user.pk)
    return user


def login(email: str | None, password: str | None) -> LoginResult:
    """Check credentials and issue a token pair.

    The refresh token replaces whatever token was stored for the user,
    so at most one session per user can be refreshed.

    Args:
        email: Login email.
        password: Raw password.

    Returns:
        LoginResult with both tokens and the user.

    Raises:
        ValidationError: If a field is missing.
        ConfigError: If signing secrets are missing.
        AuthError: If the email is unknown or the password is wrong.
    """
    if not email or not password:
        raise ValidationError('Email and password are required')
    _require_strings(email, password)

    token_settings = TokenSettings.from_settings()
    token_settings.require_secrets()

    user = User.objects.filter(email=email.strip().lower()).first()
    if user is None:
        # Run the hasher anyway so unknown emails take as long to reject
        make_password(password)
        logger.warning('Login failed: unknown email')
        raise AuthError(_INVALID_CREDENTIALS)

    if not user.check_password(password) or not user.is_active:
        logger.warning('Login failed for user ID %d', user.pk)
        raise AuthError(_INVALID_CREDENTIALS)

    claims = Identity.from_user(user).claims()
    access_token = encode_token(
        claims,
        token_settings.access_secret,
        token_settings.algorithm,
        token_settings.access_lifetime,
        ACCESS_TOKEN_TYPE,
    )
    refresh_token = encode_token(
        claims,
        token_settings.refresh_secret,
        token_settings.algorithm,
        token_settings.refresh_lifetime,
        REFRESH_TOKEN_TYPE,
    )

    user.refresh_token = refresh_token
    user.save(update_fields=['refresh_token', 'updated_at'])
    logger.info('User logged in: %s (ID: %d)', user.username, user.pk)

    return LoginResult(
        access_token=access_token,
        refresh_token=refresh_token,
        user=user,
    )


def extract_bearer_token(authorization: str | None) -> str:
    """Pull the token out of an ``Authorization: Bearer`` header.

    Args:
        authorization: Raw header value.

    Returns:
        The token part of the header.

    Raises:
        AuthError: If the header or token is missing.
    """
    if authorization:
        scheme, _, token = authorization.strip().partition(' ')
        token = token.strip()
        if scheme.lower() == _BEARER_PREFIX and token:
            return token
    raise AuthError('Access token required')


def verify_access_token(token: str) -> Identity:
    """Check an access token and return the caller's identity.

    Pure check against the signing secret; no database access.

    Args:
        token: Encoded access token.

    Returns:
        Identity from the token claims.

    Raises:
        AuthError: If the token is empty.
        ConfigError: If the access secret is missing.
        InvalidTokenError: If the token is forged, expired or not an
            access token.
    """
    if not token:
        raise AuthError('Access token required')

    token_settings = TokenSettings.from_settings()
    payload = decode_token(
        token,
        token_settings.require_access_secret(),
        token_settings.algorithm,
        ACCESS_TOKEN_TYPE,
    )
    return Identity.from_claims(payload)


def refresh_access_token(refresh_token: str | None) -> str:
    """Issue a new access token for a stored refresh token.

    The refresh token itself is not rotated and stays valid until it
    expires, the user logs out or logs in again.

    Args:
        refresh_token: Refresh token from a previous login.

    Returns:
        New access token.

    Raises:
        ValidationError: If the token is missing.
        ConfigError: If signing secrets are missing.
        InvalidTokenError: If the token is forged, expired, or no longer
            the one stored for its user.
    """
    if not refresh_token:
        raise ValidationError('Refresh token required')
    _require_strings(refresh_token)

    token_settings = TokenSettings.from_settings()
    token_settings.require_secrets()

    payload = decode_token(
        refresh_token,
        token_settings.refresh_secret,
        token_settings.algorithm,
        REFRESH_TOKEN_TYPE,
    )
    identity = Identity.from_claims(payload)

    user = User.objects.filter(pk=identity.id).first()
    if user is None or user.refresh_token != refresh_token:
        logger.warning(
            'Rejected refresh token for user ID %d',
            identity.id,
        )
        raise InvalidTokenError('Invalid refresh token')

    return encode_token(
        Identity.from_user(user).claims(),
        token_settings.access_secret,
        token_settings.algorithm,
        token_settings.access_lifetime,
        ACCESS_TOKEN_TYPE,
    )


def logout(identity: Identity) -> None:
    """Revoke the stored refresh token of the caller.

    Args:
        identity: Authenticated caller.
    """
    User.objects.filter(pk=identity.id).update(refresh_token=None)
    logger.info('User logged out: ID %d', identity.id)


def get_profile(identity: Identity) -> User:
    """Load the caller's user record.

    Args:
        identity: Authenticated caller.

    Returns:
        User instance.

    Raises:
        NotFoundError: If the user no longer exists.
    """
    try:
        return User.objects.get(pk=identity.id)
    except User.DoesNotExist as error:
        raise NotFoundError('User not found') from error


def _require_strings(*values: Any) -> None:
    """Reject body fields that arrived as numbers, lists or objects.

    Raises:
        ValidationError: If any value is not a string.
    """
    if any(not isinstance(value, str) for value in values):
        raise ValidationError('Fields must be strings')


def _check_unique(username: str, email: str) -> None:
    """Raise a conflict naming the field that is already taken.

    Raises:
        ConflictError: If the email or username exists.
    """
    if User.objects.filter(email=email).exists():
        raise ConflictError('email')
    if User.objects.filter(username=username).exists():
        raise ConflictError('username')
