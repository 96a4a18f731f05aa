"""
Month-end payroll: snapshot each active driver/turnboy's figures for a period and close it.
    total_fines  = sum of fine_cost for fines dated in the month (paid or not)
    net_salary   = original_salary (Employee.salary) - total_fines
The period row is locked for the whole run, so the "already processed" guard, the record
upserts and the open -> processed flip commit together or not at all.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from .exceptions import InvalidState
from .models import Employee, Fine, PayrollPeriod, PayrollRecord
from .payroll_periods import get_or_create_period

logger = logging.getLogger(__name__)


def fine_totals_by_employee(first, last, employee_ids=None):
    """employee_id -> Σ fine_cost for fines dated first..last (inclusive)."""
    qs = Fine.objects.filter(fine_date__gte=first, fine_date__lte=last)
    if employee_ids is not None:
        qs = qs.filter(employee_id__in=employee_ids)
    return {
        r['employee_id']: r['total'] or Decimal('0')
        for r in qs.values('employee_id').annotate(total=Sum('fine_cost'))
    }


def process_month_end(year, month, actor_id=None):
    """Close (year, month). Returns (period, records_created). Raises InvalidState if already processed."""
    period = get_or_create_period(year, month)

    with transaction.atomic():
        period = PayrollPeriod.objects.select_for_update().get(pk=period.pk)
        if period.is_processed:
            logger.warning('Month-end for %s rejected: already processed', period.period_name)
            raise InvalidState('This period has already been processed')

        first, last = period.date_range()
        employees = list(
            Employee.objects.filter(
                role__in=Employee.PAYROLL_ROLES,
                status=Employee.STATUS_ACTIVE,
            ).order_by('id')
        )
        employee_ids = [e.pk for e in employees]
        totals = fine_totals_by_employee(first, last, employee_ids)

        # Backfill fines of the month that were never attached to a period
        tagged = Fine.objects.filter(
            employee_id__in=employee_ids,
            fine_date__gte=first,
            fine_date__lte=last,
            payroll_period__isnull=True,
        ).update(payroll_period=period)

        records_created = 0
        for emp in employees:
            original_salary = emp.salary or Decimal('0')
            total_fines = totals.get(emp.pk, Decimal('0'))
            PayrollRecord.objects.update_or_create(
                payroll_period=period,
                employee=emp,
                defaults={
                    'original_salary': original_salary,
                    'total_fines': total_fines,
                    'net_salary': original_salary - total_fines,
                    'status': PayrollRecord.STATUS_PROCESSED,
                },
            )
            records_created += 1

        period.status = PayrollPeriod.STATUS_PROCESSED
        period.processed_at = timezone.now()
        period.processed_by = actor_id
        period.save(update_fields=['status', 'processed_at', 'processed_by'])

    logger.info(
        'Month-end processed for %s: %s record(s), %s fine(s) backfilled, by=%s',
        period.period_name, records_created, tagged, actor_id,
    )
    return period, records_created
