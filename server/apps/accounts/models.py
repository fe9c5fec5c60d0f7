"""Database models for accounts app."""

from typing import Any, Final, final, override

from django.contrib.auth.models import AbstractUser
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.core.validators import MinLengthValidator
from django.db import models

# Username length bounds
USERNAME_MIN_LENGTH: Final = 3
USERNAME_MAX_LENGTH: Final = 30


@final
class User(AbstractUser):
    """Registered user owning files.

    Email is the login identifier and is stored lower-cased. The
    ``refresh_token`` column is a single session slot: a new login
    overwrites it and logout clears it, which revokes any refresh
    token issued before.
    """

    username = models.CharField(
        max_length=USERNAME_MAX_LENGTH,
        unique=True,
        validators=[
            UnicodeUsernameValidator(),
            MinLengthValidator(USERNAME_MIN_LENGTH),
        ],
        error_messages={
            'unique': 'Username already exists',
        },
    )

    email = models.EmailField(
        unique=True,
        error_messages={
            'unique': 'Email already exists',
        },
    )

    refresh_token = models.TextField(
        null=True,
        blank=True,
        default=None,
        help_text='Currently valid refresh token, if any',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'User'  # type: ignore[mutable-override]
        verbose_name_plural = 'Users'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.username} <{self.email}>'

    def summary(self) -> dict[str, Any]:
        """Public representation, without password or refresh token.

        Returns:
            Dictionary with id, username, email and creation time.
        """
        return {
            'id': self.pk,
            'username': self.username,
            'email': self.email,
            'createdAt': self.created_at.isoformat(),
        }
