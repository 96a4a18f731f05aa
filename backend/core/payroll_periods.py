"""
Payroll period resolver: map a calendar date to the PayrollPeriod row for its month.
Find-or-create is atomic per (year, month): the unique constraint on the table plus
get_or_create's insert-then-reread on IntegrityError means two requests touching a
new month at the same time end up with the same row.
"""
import calendar
import logging
from calendar import monthrange
from datetime import date, datetime, time

from django.db import IntegrityError
from django.utils import timezone

from .exceptions import Conflict, InvalidArgument
from .models import PayrollPeriod

logger = logging.getLogger(__name__)

# datetime's supported range
MIN_YEAR, MAX_YEAR = 1, 9999


def period_name(year, month):
    return f"{calendar.month_name[month]} {year}"


def period_bounds(year, month):
    """(start, end): first instant and last instant (23:59:59.999) of the month, in the current timezone."""
    _, last_day = monthrange(year, month)
    start = timezone.make_aware(datetime(year, month, 1))
    end = timezone.make_aware(datetime.combine(date(year, month, last_day), time(23, 59, 59, 999000)))
    return start, end


def as_local_date(value):
    """Calendar date of a date/datetime as seen in the configured TIME_ZONE."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgument(f'Invalid date: {value!r}')


def validate_year_month(year, month):
    """Coerce to ints and check the calendar range. Raises InvalidArgument."""
    try:
        year, month = int(year), int(month)
    except (TypeError, ValueError):
        raise InvalidArgument('Year and month must be integers')
    if month < 1 or month > 12:
        raise InvalidArgument('Month must be 1-12')
    if year < MIN_YEAR or year > MAX_YEAR:
        raise InvalidArgument(f'Year must be {MIN_YEAR}-{MAX_YEAR}')
    return year, month


def get_or_create_period(year, month):
    year, month = validate_year_month(year, month)

    start, end = period_bounds(year, month)
    try:
        period, created = PayrollPeriod.objects.get_or_create(
            year=year,
            month=month,
            defaults={
                'period_name': period_name(year, month),
                'start_date': start,
                'end_date': end,
                'status': PayrollPeriod.STATUS_OPEN,
            },
        )
    except IntegrityError as e:
        # get_or_create already re-reads after a lost insert race; reaching here means the row vanished again
        logger.error('Payroll period %s-%02d could not be created or read back: %s', year, month, e)
        raise Conflict(f'Payroll period {year}-{month:02d} could not be created')
    if created:
        logger.info('Created payroll period %s (id=%s)', period.period_name, period.pk)
    return period


def resolve_period(value=None):
    """PayrollPeriod covering the given date/datetime (default: now)."""
    day = as_local_date(value if value is not None else timezone.now())
    return get_or_create_period(day.year, day.month)


def current_period():
    return resolve_period(timezone.now())
