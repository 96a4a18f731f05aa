"""
Payment recorder: apply a partial or full payment against a fine's remaining balance.
Read-validate-write runs in one transaction with the fine row locked (SELECT ... FOR UPDATE),
so two concurrent payments cannot both pass the balance check against a stale value.
Payments are accounting-only; Employee.salary is never touched.
"""
import logging
from datetime import date, datetime, time
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from .exceptions import InvalidArgument, NotFound
from .fine_logic import fmt_amount, to_amount
from .models import Fine, Payment
from .payroll_periods import resolve_period

logger = logging.getLogger(__name__)


def _payment_datetime(value):
    if value is None:
        return timezone.now()
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    if isinstance(value, date):
        return timezone.make_aware(datetime.combine(value, time.min))
    raise InvalidArgument('Invalid payment_date')


def record_payment(fine_id, amount, payment_date=None, notes='', created_by=None):
    """
    Validate (amount > 0, fine exists, amount <= remaining), insert the Payment tagged to the
    period of payment_date, and move paid/remaining/pay_status on the fine. Returns (payment, fine).
    """
    amount = to_amount(amount, 'amount')
    if amount <= 0:
        raise InvalidArgument('Payment amount must be greater than 0')
    paid_at = _payment_datetime(payment_date)

    with transaction.atomic():
        fine = Fine.objects.select_for_update().filter(pk=fine_id).first()
        if not fine:
            raise NotFound('Fine not found')

        remaining = fine.current_remaining()
        if amount > remaining:
            logger.warning(
                'Rejected payment on fine %s: amount %s exceeds remaining %s',
                fine.pk, amount, remaining,
            )
            raise InvalidArgument(
                f'Payment amount ({fmt_amount(amount)}) exceeds remaining balance ({fmt_amount(remaining)})'
            )

        period = resolve_period(paid_at)
        payment = Payment.objects.create(
            fine=fine,
            amount=amount,
            payment_date=paid_at,
            payroll_period=period,
            notes=notes or '',
            created_by=created_by,
        )

        fine.paid_amount = (fine.paid_amount or Decimal('0')) + amount
        fine.apply_balance()
        fine.save(update_fields=['paid_amount', 'remaining_amount', 'pay_status', 'updated_at'])

    logger.info(
        'Payment %s recorded on fine %s: amount=%s remaining=%s status=%s period=%s',
        payment.pk, fine.pk, amount, fine.remaining_amount, fine.pay_status, period.period_name,
    )
    return payment, fine


def payment_history(fine_id):
    """Fine balance summary plus all its payments, newest first, and their total."""
    fine = Fine.objects.filter(pk=fine_id).first()
    if not fine:
        raise NotFound('Fine not found')
    payments = fine.payments.select_related('payroll_period').order_by('-payment_date', '-id')
    total_paid = payments.aggregate(s=Sum('amount'))['s'] or Decimal('0')
    return fine, list(payments), total_paid
