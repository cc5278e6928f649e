"""
Geopolitical — Test Settings

In-memory SQLite and no throttling. Activated by pytest through
DJANGO_SETTINGS_MODULE=config.settings.test (see pyproject.toml).

@file config/settings/test.py
"""

from .base import *  # noqa: F401, F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    },
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []  # noqa: F405

LOGGING['loggers']['geopolitical']['level'] = 'DEBUG'  # noqa: F405
