"""
Failed-login counter with temporary lockout, kept in Django's cache (per email, case-insensitive).
Default cache is per-process; point CACHES at Redis/Memcached for a multi-instance deployment.
"""
import logging
import time

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)


def _key(identifier):
    return f"login-lockout:{(identifier or '').strip().lower()}"


def lockout_remaining(identifier):
    """Seconds until the identifier may try again; 0 if not locked."""
    entry = cache.get(_key(identifier))
    if not entry or not entry.get('locked_until'):
        return 0
    remaining = int(entry['locked_until'] - time.time())
    if remaining <= 0:
        cache.delete(_key(identifier))
        return 0
    return remaining


def record_failed_attempt(identifier):
    """Count a failed login; lock the identifier once LOGIN_MAX_ATTEMPTS is reached. Returns attempts so far."""
    lockout_seconds = settings.LOGIN_LOCKOUT_SECONDS
    entry = cache.get(_key(identifier)) or {'attempts': 0, 'locked_until': None}
    entry['attempts'] += 1
    if entry['attempts'] >= settings.LOGIN_MAX_ATTEMPTS:
        entry['locked_until'] = time.time() + lockout_seconds
        logger.warning('Login locked for %s after %s failed attempts', identifier, entry['attempts'])
    cache.set(_key(identifier), entry, timeout=lockout_seconds)
    return entry['attempts']


def clear_failed_attempts(identifier):
    cache.delete(_key(identifier))
