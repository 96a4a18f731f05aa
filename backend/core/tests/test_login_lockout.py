import pytest

from core.login_lockout import clear_failed_attempts, lockout_remaining, record_failed_attempt


def test_locks_after_max_attempts(settings):
    settings.LOGIN_MAX_ATTEMPTS = 3
    settings.LOGIN_LOCKOUT_SECONDS = 600
    for _ in range(2):
        record_failed_attempt('user@fleet.test')
    assert lockout_remaining('user@fleet.test') == 0

    assert record_failed_attempt('user@fleet.test') == 3
    remaining = lockout_remaining('USER@fleet.test')
    assert 0 < remaining <= 600


def test_clear_resets_counter(settings):
    settings.LOGIN_MAX_ATTEMPTS = 2
    record_failed_attempt('user@fleet.test')
    clear_failed_attempts('user@fleet.test')
    assert record_failed_attempt('user@fleet.test') == 1
    assert lockout_remaining('user@fleet.test') == 0


def test_lock_expires(settings, monkeypatch):
    settings.LOGIN_MAX_ATTEMPTS = 1
    settings.LOGIN_LOCKOUT_SECONDS = 60
    record_failed_attempt('user@fleet.test')
    assert lockout_remaining('user@fleet.test') > 0

    import core.login_lockout as lockout
    real_time = lockout.time.time
    monkeypatch.setattr(lockout.time, 'time', lambda: real_time() + 61)
    assert lockout_remaining('user@fleet.test') == 0


@pytest.mark.parametrize('identifier', ['a@fleet.test', 'b@fleet.test'])
def test_identifiers_are_independent(settings, identifier):
    settings.LOGIN_MAX_ATTEMPTS = 1
    record_failed_attempt('other@fleet.test')
    assert lockout_remaining(identifier) == 0
