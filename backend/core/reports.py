"""
Monthly summary report: fines by employee, deliveries by status, expenses by type, and the
payroll period's records for one month. Read-only; a month with no data yields zeros.
"""
from decimal import Decimal

from django.db.models import Count, Q, Sum

from .models import Delivery, Expense, Fine, PayrollPeriod, PayrollRecord
from .payroll_periods import period_bounds, validate_year_month


def _fines_summary(first, last):
    fines = Fine.objects.filter(fine_date__gte=first, fine_date__lte=last)
    agg = fines.aggregate(total=Count('id'), total_amount=Sum('fine_cost'))
    by_employee = []
    rows = fines.values('employee_id', 'employee__name', 'employee__role').annotate(
        total_fines=Sum('fine_cost'),
        total_paid=Sum('paid_amount'),
        fine_count=Count('id'),
    ).order_by('employee__name')
    for r in rows:
        by_employee.append({
            'employee': {'id': r['employee_id'], 'name': r['employee__name'], 'role': r['employee__role']},
            'total_fines': r['total_fines'] or Decimal('0'),
            'total_paid': r['total_paid'] or Decimal('0'),
            'fine_count': r['fine_count'],
        })
    return {
        'total': agg['total'] or 0,
        'total_amount': agg['total_amount'] or Decimal('0'),
        'by_employee': by_employee,
    }


def _deliveries_summary(first, last):
    agg = Delivery.objects.filter(delivery_date__gte=first, delivery_date__lte=last).aggregate(
        total=Count('id'),
        delivered=Count('id', filter=Q(status=Delivery.STATUS_DELIVERED)),
        pending=Count('id', filter=Q(status=Delivery.STATUS_PENDING)),
        in_transit=Count('id', filter=Q(status=Delivery.STATUS_IN_TRANSIT)),
        cancelled=Count('id', filter=Q(status=Delivery.STATUS_CANCELLED)),
        total_income=Sum('total_income', filter=Q(status=Delivery.STATUS_DELIVERED)),
    )
    agg['total_income'] = agg['total_income'] or Decimal('0')
    return agg


def _expenses_summary(first, last):
    expenses = Expense.objects.filter(expense_date__gte=first, expense_date__lte=last)
    agg = expenses.aggregate(total=Count('id'), total_amount=Sum('amount'))
    by_type = {
        (r['expense_type'] or 'other'): r['amount'] or Decimal('0')
        for r in expenses.values('expense_type').annotate(amount=Sum('amount')).order_by('expense_type')
    }
    return {
        'total': agg['total'] or 0,
        'total_amount': agg['total_amount'] or Decimal('0'),
        'by_type': by_type,
    }


def _payroll_summary(year, month):
    period = PayrollPeriod.objects.filter(year=year, month=month).first()
    if not period:
        return None
    records = list(
        PayrollRecord.objects.filter(payroll_period=period).values(
            'id', 'employee_id', 'employee__name', 'employee__role',
            'original_salary', 'total_fines', 'net_salary', 'status',
        ).order_by('employee__name')
    )
    return {
        'id': period.pk,
        'period_name': period.period_name,
        'status': period.status,
        'processed_at': period.processed_at,
        'records': records,
    }


def monthly_summary(year, month):
    year, month = validate_year_month(year, month)
    start, end = period_bounds(year, month)
    first, last = start.date(), end.date()
    return {
        'period': {'year': year, 'month': month, 'start_date': start, 'end_date': end},
        'fines': _fines_summary(first, last),
        'deliveries': _deliveries_summary(first, last),
        'expenses': _expenses_summary(first, last),
        'payroll': _payroll_summary(year, month),
    }
