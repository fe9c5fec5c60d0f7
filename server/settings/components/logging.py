"""Logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this
routes those loggers to the console.
"""

from server.settings.components import config

_LOG_LEVEL = config('DJANGO_LOG_LEVEL', default='INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'console': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'console',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'server': {
            'level': _LOG_LEVEL,
        },
        # boto is chatty on INFO
        'botocore': {
            'level': 'WARNING',
        },
    },
}
