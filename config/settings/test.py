"""Test settings for QueueIndia.

In-memory SQLite, inline Celery, in-memory mail and no retry backoff so
the suite runs without Redis or PostgreSQL.
"""

import tempfile

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'OPTIONS': {'timeout': 5, 'transaction_mode': 'IMMEDIATE'},
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
MEDIA_ROOT = tempfile.mkdtemp(prefix='queueindia-media-')

BOOKING_ENGINE = {
    **BOOKING_ENGINE,
    'RESERVE_RETRY_BACKOFF_SECONDS': 0,
    'RESERVE_RETRY_BACKOFF_MAX_SECONDS': 0,
}

LOGGING['loggers']['apps']['level'] = 'WARNING'
LOGGING['loggers']['shared']['level'] = 'WARNING'
