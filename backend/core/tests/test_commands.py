from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.models import PayrollPeriod, PayrollRecord

pytestmark = pytest.mark.django_db


def test_process_month_end_command(employee_factory, admin_employee):
    emp = employee_factory(salary=Decimal('1000'))
    out = StringIO()
    call_command('process_month_end', '11', '2025', '--actor', str(admin_employee.pk), stdout=out)

    period = PayrollPeriod.objects.get(year=2025, month=11)
    assert period.is_processed
    assert period.processed_by == admin_employee.pk
    assert PayrollRecord.objects.get(payroll_period=period, employee=emp).net_salary == Decimal('1000')
    assert 'November 2025' in out.getvalue()


def test_process_month_end_command_twice_fails():
    call_command('process_month_end', '11', '2025', stdout=StringIO())
    with pytest.raises(CommandError, match='already been processed'):
        call_command('process_month_end', '11', '2025', stdout=StringIO())


def test_process_month_end_command_bad_month():
    with pytest.raises(CommandError):
        call_command('process_month_end', '13', '2025', stdout=StringIO())
