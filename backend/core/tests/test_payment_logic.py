from datetime import date, datetime
from decimal import Decimal
from unittest import mock

import pytest
from django.db import transaction
from django.db.models.query import QuerySet
from django.utils import timezone

from core.exceptions import InvalidArgument, NotFound
from core.models import Employee, Fine, Payment
from core.payment_logic import payment_history, record_payment

pytestmark = pytest.mark.django_db


def _assert_balance_invariant(fine):
    fine.refresh_from_db()
    assert fine.remaining_amount == max(Decimal('0'), fine.fine_cost - fine.paid_amount)
    assert (fine.pay_status == Fine.PAY_STATUS_PAID) == (fine.remaining_amount <= 0)
    total = sum((p.amount for p in fine.payments.all()), Decimal('0'))
    assert total == fine.paid_amount


def test_partial_then_full_payment(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_cost='50000')

    _, fine = record_payment(fine.pk, '20000')
    assert fine.paid_amount == Decimal('20000')
    assert fine.remaining_amount == Decimal('30000')
    assert fine.pay_status == Fine.PAY_STATUS_UNPAID
    _assert_balance_invariant(fine)

    _, fine = record_payment(fine.pk, '30000')
    assert fine.remaining_amount == Decimal('0')
    assert fine.pay_status == Fine.PAY_STATUS_PAID
    _assert_balance_invariant(fine)


def test_overpayment_rejected_without_side_effects(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_cost='50000')
    record_payment(fine.pk, '20000')

    with pytest.raises(InvalidArgument) as exc:
        record_payment(fine.pk, '40000')
    assert str(exc.value) == 'Payment amount (40000) exceeds remaining balance (30000)'

    fine.refresh_from_db()
    assert fine.paid_amount == Decimal('20000')
    assert fine.remaining_amount == Decimal('30000')
    assert Payment.objects.filter(fine=fine).count() == 1


@pytest.mark.parametrize('amount', ['0', '-1'])
def test_non_positive_amount_rejected(driver, truck, fine_factory, amount):
    fine = fine_factory(driver, truck)
    with pytest.raises(InvalidArgument):
        record_payment(fine.pk, amount)
    assert Payment.objects.count() == 0


def test_non_positive_amount_checked_before_fine_lookup():
    with pytest.raises(InvalidArgument):
        record_payment(999999, '0')


def test_missing_fine():
    with pytest.raises(NotFound):
        record_payment(999999, '100')


def test_payment_never_touches_salary(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_cost='10000')
    record_payment(fine.pk, '10000')
    assert Employee.objects.get(pk=driver.pk).salary == Decimal('50000')


def test_payment_tagged_with_period_of_payment_date(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_date=date(2025, 11, 20))
    paid_at = timezone.make_aware(datetime(2025, 12, 2, 9, 0))
    payment, _ = record_payment(fine.pk, '100', payment_date=paid_at)
    assert (payment.payroll_period.year, payment.payroll_period.month) == (2025, 12)
    assert fine.payroll_period_id != payment.payroll_period_id


def test_payment_date_as_plain_date(driver, truck, fine_factory):
    fine = fine_factory(driver, truck)
    payment, _ = record_payment(fine.pk, '100', payment_date=date(2025, 11, 21))
    assert payment.payment_date.date() == date(2025, 11, 21)


def test_failed_fine_update_rolls_back_payment(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_cost='10000')
    with mock.patch.object(Fine, 'save', side_effect=RuntimeError('disk full')):
        with pytest.raises(RuntimeError):
            record_payment(fine.pk, '5000')
    assert Payment.objects.count() == 0
    fine.refresh_from_db()
    assert fine.paid_amount == Decimal('0')
    assert fine.remaining_amount == Decimal('10000')


def test_payment_history_newest_first(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_cost='1000')
    older, _ = record_payment(fine.pk, '100', payment_date=timezone.make_aware(datetime(2025, 11, 1)))
    newer, _ = record_payment(fine.pk, '250', payment_date=timezone.make_aware(datetime(2025, 11, 9)))

    fine, payments, total_paid = payment_history(fine.pk)
    assert [p.pk for p in payments] == [newer.pk, older.pk]
    assert total_paid == Decimal('350')
    assert fine.remaining_amount == Decimal('650')


@pytest.mark.django_db(transaction=True)
def test_second_payment_sees_committed_balance(driver, truck, fine_factory):
    # Each call commits on its own; the second re-reads the locked row instead of a stale balance
    fine = fine_factory(driver, truck, fine_cost='10000')
    stale = Fine.objects.get(pk=fine.pk)

    record_payment(fine.pk, '7000')
    assert stale.remaining_amount == Decimal('10000')
    with pytest.raises(InvalidArgument):
        record_payment(stale.pk, '7000')

    fine.refresh_from_db()
    assert fine.paid_amount == Decimal('7000')
    assert fine.paid_amount <= fine.fine_cost
    assert Payment.objects.filter(fine=fine).count() == 1
    _assert_balance_invariant(fine)


@pytest.mark.django_db(transaction=True)
def test_fine_row_locked_inside_payment_transaction(driver, truck, fine_factory):
    fine = fine_factory(driver, truck, fine_cost='500')
    real_select_for_update = QuerySet.select_for_update
    locks = []

    def spy(qs, *args, **kwargs):
        locks.append((qs.model, transaction.get_connection().in_atomic_block))
        return real_select_for_update(qs, *args, **kwargs)

    with mock.patch.object(QuerySet, 'select_for_update', spy):
        record_payment(fine.pk, '200')

    assert (Fine, True) in locks
