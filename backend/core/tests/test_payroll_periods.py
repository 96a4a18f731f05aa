from datetime import date, datetime
from unittest import mock

import pytest
from django.db.models.query import QuerySet
from django.utils import timezone

from core.exceptions import InvalidArgument
from core.models import PayrollPeriod
from core.payroll_periods import (
    current_period, get_or_create_period, period_bounds, period_name, resolve_period,
)

pytestmark = pytest.mark.django_db


def test_period_name_uses_english_month():
    assert period_name(2025, 11) == 'November 2025'
    assert period_name(2024, 2) == 'February 2024'


def test_period_bounds_cover_whole_month():
    start, end = period_bounds(2024, 2)
    assert start == timezone.make_aware(datetime(2024, 2, 1))
    assert end.date() == date(2024, 2, 29)
    assert (end.hour, end.minute, end.second, end.microsecond) == (23, 59, 59, 999000)


def test_get_or_create_is_idempotent():
    first = get_or_create_period(2025, 11)
    second = get_or_create_period(2025, 11)
    assert first.pk == second.pk
    assert PayrollPeriod.objects.filter(year=2025, month=11).count() == 1
    assert first.status == PayrollPeriod.STATUS_OPEN
    assert first.period_name == 'November 2025'


@pytest.mark.parametrize('year, month', [(2025, 0), (2025, 13), ('x', 1), (0, 1), (10000, 1), (-5, 6)])
def test_get_or_create_rejects_bad_year_or_month(year, month):
    with pytest.raises(InvalidArgument):
        get_or_create_period(year, month)
    assert PayrollPeriod.objects.count() == 0


def test_resolve_period_from_date_and_datetime():
    by_date = resolve_period(date(2025, 11, 30))
    by_datetime = resolve_period(timezone.make_aware(datetime(2025, 11, 1, 8, 30)))
    assert by_date.pk == by_datetime.pk
    assert (by_date.year, by_date.month) == (2025, 11)


def test_resolve_period_last_day_of_month_stays_in_month():
    period = resolve_period(date(2025, 12, 31))
    assert (period.year, period.month) == (2025, 12)


def test_current_period_follows_clock():
    fixed = timezone.make_aware(datetime(2026, 3, 14, 12, 0))
    with mock.patch('core.payroll_periods.timezone.now', return_value=fixed):
        period = current_period()
    assert (period.year, period.month) == (2026, 3)
    assert period.period_name == 'March 2026'


def test_edge_years_accepted():
    assert get_or_create_period(1, 1).period_name == 'January 1'
    assert get_or_create_period(9999, 12).end_date.date() == date(9999, 12, 31)


def test_lost_insert_race_returns_winner_row():
    # Another request inserts November 2025 between our lookup and our insert
    real_get = QuerySet.get
    winner = {}

    def racing_get(qs, *args, **kwargs):
        if qs.model is PayrollPeriod and not winner:
            start, end = period_bounds(2025, 11)
            winner['period'] = PayrollPeriod.objects.create(
                year=2025, month=11, period_name='November 2025', start_date=start, end_date=end,
            )
            raise PayrollPeriod.DoesNotExist
        return real_get(qs, *args, **kwargs)

    with mock.patch.object(QuerySet, 'get', racing_get):
        period = get_or_create_period(2025, 11)

    assert period.pk == winner['period'].pk
    assert PayrollPeriod.objects.filter(year=2025, month=11).count() == 1
    assert resolve_period(date(2025, 11, 15)).pk == period.pk
