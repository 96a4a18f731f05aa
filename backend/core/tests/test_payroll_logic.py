from datetime import date
from decimal import Decimal

import pytest

from core.exceptions import InvalidArgument, InvalidState
from core.models import Employee, Fine, PayrollPeriod, PayrollRecord
from core.payment_logic import record_payment
from core.payroll_logic import fine_totals_by_employee, process_month_end

pytestmark = pytest.mark.django_db


def test_net_salary_is_salary_minus_month_fines(employee_factory, truck, fine_factory):
    emp = employee_factory(salary=Decimal('250000'))
    fine_factory(emp, truck, fine_cost='10000', fine_date=date(2025, 11, 3))
    fine_factory(emp, truck, fine_cost='5000', fine_date=date(2025, 11, 27))
    fine_factory(emp, truck, fine_cost='7000', fine_date=date(2025, 12, 1))

    period, created = process_month_end(2025, 11)

    record = PayrollRecord.objects.get(payroll_period=period, employee=emp)
    assert created == 1
    assert record.original_salary == Decimal('250000')
    assert record.total_fines == Decimal('15000')
    assert record.net_salary == Decimal('235000')
    assert record.status == PayrollRecord.STATUS_PROCESSED
    emp.refresh_from_db()
    assert emp.salary == Decimal('250000')


def test_paid_fines_still_count_toward_total(employee_factory, truck, fine_factory):
    emp = employee_factory(salary=Decimal('100000'))
    fine = fine_factory(emp, truck, fine_cost='8000', fine_date=date(2025, 11, 3))
    record_payment(fine.pk, '8000')

    period, _ = process_month_end(2025, 11)
    record = PayrollRecord.objects.get(payroll_period=period, employee=emp)
    assert record.total_fines == Decimal('8000')
    assert record.net_salary == Decimal('92000')


def test_only_active_drivers_and_turnboys_get_records(employee_factory):
    driver = employee_factory(role=Employee.ROLE_DRIVER)
    turnboy = employee_factory(role=Employee.ROLE_TURNBOY)
    employee_factory(role=Employee.ROLE_ADMIN)
    employee_factory(role=Employee.ROLE_VIEWS)
    employee_factory(role=Employee.ROLE_DRIVER, status=Employee.STATUS_INACTIVE)

    period, created = process_month_end(2025, 11)

    assert created == 2
    assert set(period.records.values_list('employee_id', flat=True)) == {driver.pk, turnboy.pk}


def test_period_marked_processed(driver, admin_employee):
    period, _ = process_month_end(2025, 11, actor_id=admin_employee.pk)
    period.refresh_from_db()
    assert period.status == PayrollPeriod.STATUS_PROCESSED
    assert period.processed_at is not None
    assert period.processed_by == admin_employee.pk


def test_second_run_rejected_and_records_unchanged(employee_factory, truck, fine_factory):
    emp = employee_factory(salary=Decimal('250000'))
    fine_factory(emp, truck, fine_cost='10000', fine_date=date(2025, 11, 3))

    period, created = process_month_end(2025, 11)
    assert created > 0
    before = list(PayrollRecord.objects.filter(payroll_period=period).values(
        'id', 'employee_id', 'original_salary', 'total_fines', 'net_salary', 'status', 'updated_at',
    ))

    # New data after closing must not leak into the closed period
    emp.salary = Decimal('1')
    emp.save()
    fine_factory(emp, truck, fine_cost='999', fine_date=date(2025, 11, 4))

    with pytest.raises(InvalidState) as exc:
        process_month_end(2025, 11)
    assert 'already been processed' in str(exc.value)

    after = list(PayrollRecord.objects.filter(payroll_period=period).values(
        'id', 'employee_id', 'original_salary', 'total_fines', 'net_salary', 'status', 'updated_at',
    ))
    assert after == before


def test_backfills_fines_without_period(employee_factory, truck, fine_factory):
    emp = employee_factory()
    fine = fine_factory(emp, truck, fine_date=date(2025, 11, 3))
    Fine.objects.filter(pk=fine.pk).update(payroll_period=None)

    period, _ = process_month_end(2025, 11)
    fine.refresh_from_db()
    assert fine.payroll_period_id == period.pk


def test_month_end_with_no_staff_still_closes_period():
    period, created = process_month_end(2024, 2)
    assert created == 0
    assert period.is_processed


def test_invalid_month_rejected():
    with pytest.raises(InvalidArgument):
        process_month_end(2025, 13)
    assert PayrollPeriod.objects.count() == 0


def test_fine_totals_by_employee_window(employee_factory, truck, fine_factory):
    a, b = employee_factory(), employee_factory()
    fine_factory(a, truck, fine_cost='100', fine_date=date(2025, 11, 1))
    fine_factory(a, truck, fine_cost='50', fine_date=date(2025, 11, 30))
    fine_factory(b, truck, fine_cost='70', fine_date=date(2025, 10, 31))

    totals = fine_totals_by_employee(date(2025, 11, 1), date(2025, 11, 30))
    assert totals == {a.pk: Decimal('150')}
