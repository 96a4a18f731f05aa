"""Settings for the pytest suite: SQLite and in-process cache."""
from .settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'fleet-tests',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length-for-hs256'

# Legacy base64 tokens are opted into per test
ALLOW_LEGACY_TOKENS = False

TIME_ZONE = 'UTC'
