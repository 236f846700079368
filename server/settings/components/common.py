"""Django settings shared by every environment.

Only the relational store and the apps are configured here: the file
store has no HTTP layer of its own.
"""

from typing import Final

from server.settings.components import BASE_DIR, config

SECRET_KEY = config('DJANGO_SECRET_KEY', default='')

DEBUG = config('DJANGO_DEBUG', cast=bool, default=False)

INSTALLED_APPS: Final[tuple[str, ...]] = (
    'server.apps.records',
    'server.apps.files',
)

# Database
# Any backend with transaction support works; PostgreSQL in production.
DATABASES = {
    'default': {
        'ENGINE': config(
            'DJANGO_DATABASE_ENGINE',
            default='django.db.backends.sqlite3',
        ),
        'NAME': config(
            'DJANGO_DATABASE_NAME',
            default=str(BASE_DIR.joinpath('db.sqlite3')),
        ),
        'USER': config('DJANGO_DATABASE_USER', default=''),
        'PASSWORD': config('DJANGO_DATABASE_PASSWORD', default=''),
        'HOST': config('DJANGO_DATABASE_HOST', default=''),
        'PORT': config('DJANGO_DATABASE_PORT', default=''),
        'CONN_MAX_AGE': config('CONN_MAX_AGE', cast=int, default=60),
    },
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Timestamps are always stored in UTC
USE_TZ = True
TIME_ZONE = 'UTC'
