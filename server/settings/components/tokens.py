"""Credential token settings.

Both signing secrets must be set for login and refresh to work;
verification only needs the access secret.
"""

from server.settings.components import config

JWT_SECRET = config('JWT_SECRET', default='')
JWT_REFRESH_SECRET = config('JWT_REFRESH_SECRET', default='')
JWT_ALGORITHM = config('JWT_ALGORITHM', default='HS256')

# Lifetimes in seconds: 15 minutes and 7 days
ACCESS_TOKEN_LIFETIME = config('ACCESS_TOKEN_LIFETIME', cast=int, default=900)
REFRESH_TOKEN_LIFETIME = config(
    'REFRESH_TOKEN_LIFETIME',
    cast=int,
    default=7 * 24 * 60 * 60,
)
