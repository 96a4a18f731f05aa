"""
Fine ledger: create, update and delete traffic fines.
Each fine is attached to the payroll period of its fine_date when it is created and keeps
paid_amount / remaining_amount / pay_status consistent:
    remaining_amount = max(0, fine_cost - paid_amount); pay_status = paid iff remaining_amount <= 0.
Employee.salary is never changed here; net salary is derived at month-end.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from .exceptions import InvalidArgument, NotFound
from .models import Delivery, Employee, Fine, Truck
from .payroll_periods import resolve_period

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def to_amount(value, field='amount'):
    """Parse a money value to a 2-place Decimal. Raises InvalidArgument if not a number."""
    if value is None or value == '':
        raise InvalidArgument(f'{field} is required')
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidArgument(f'Invalid {field}')
    if not amount.is_finite():
        raise InvalidArgument(f'Invalid {field}')
    return amount.quantize(CENTS)


def fmt_amount(value):
    """25000.00 -> '25000', 12.50 -> '12.5' (for error messages)."""
    return format(Decimal(value).normalize(), 'f')


def _get_employee(employee_id):
    employee = Employee.objects.filter(pk=employee_id).first()
    if not employee:
        raise NotFound('Employee not found')
    return employee


def _get_truck(car_id):
    truck = Truck.objects.filter(pk=car_id).first()
    if not truck:
        raise NotFound('Truck not found')
    return truck


def _get_delivery(delivery_id):
    if delivery_id in (None, ''):
        return None
    delivery = Delivery.objects.filter(pk=delivery_id).first()
    if not delivery:
        raise NotFound('Delivery not found')
    return delivery


def create_fine(employee_id, car_id, fine_type, fine_date, fine_cost,
                delivery_id=None, description='', created_by=None):
    fine_cost = to_amount(fine_cost, 'fine_cost')
    if fine_cost <= 0:
        raise InvalidArgument('fine_cost must be greater than 0')
    if not (fine_type or '').strip():
        raise InvalidArgument('fine_type is required')
    if fine_date is None:
        raise InvalidArgument('fine_date is required')

    with transaction.atomic():
        employee = _get_employee(employee_id)
        truck = _get_truck(car_id)
        delivery = _get_delivery(delivery_id)
        period = resolve_period(fine_date)

        fine = Fine(
            employee=employee,
            car=truck,
            delivery=delivery,
            fine_type=fine_type.strip(),
            fine_date=fine_date,
            fine_cost=fine_cost,
            paid_amount=Decimal('0'),
            payroll_period=period,
            description=description or '',
            created_by=created_by,
        )
        fine.apply_balance()
        fine.save()

    logger.info(
        'Fine %s created: employee=%s cost=%s period=%s',
        fine.pk, employee.pk, fine_cost, period.period_name,
    )
    return fine


def update_fine(fine_id, **changes):
    """
    Update editable fields (fine_cost, fine_type, fine_date, description, car_id, employee_id, delivery_id).
    A new fine_cost recomputes remaining_amount / pay_status and may not drop below paid_amount.
    The fine stays attached to its original payroll period even if fine_date moves.
    """
    with transaction.atomic():
        fine = Fine.objects.select_for_update().filter(pk=fine_id).first()
        if not fine:
            raise NotFound('Fine not found')

        if 'employee_id' in changes:
            fine.employee = _get_employee(changes['employee_id'])
        if 'car_id' in changes:
            fine.car = _get_truck(changes['car_id'])
        if 'delivery_id' in changes:
            fine.delivery = _get_delivery(changes['delivery_id'])
        if 'fine_type' in changes:
            if not (changes['fine_type'] or '').strip():
                raise InvalidArgument('fine_type is required')
            fine.fine_type = changes['fine_type'].strip()
        if 'fine_date' in changes:
            if changes['fine_date'] is None:
                raise InvalidArgument('fine_date is required')
            fine.fine_date = changes['fine_date']
        if 'description' in changes:
            fine.description = changes['description'] or ''

        old_cost = fine.fine_cost
        if 'fine_cost' in changes:
            new_cost = to_amount(changes['fine_cost'], 'fine_cost')
            if new_cost <= 0:
                raise InvalidArgument('fine_cost must be greater than 0')
            if new_cost < fine.paid_amount:
                raise InvalidArgument(
                    f'fine_cost ({fmt_amount(new_cost)}) cannot be lower than the amount '
                    f'already paid ({fmt_amount(fine.paid_amount)})'
                )
            fine.fine_cost = new_cost

        fine.apply_balance()
        fine.save()

    if fine.fine_cost != old_cost:
        logger.info('Fine %s cost changed %s -> %s', fine.pk, old_cost, fine.fine_cost)
    else:
        logger.info('Fine %s updated', fine.pk)
    return fine


def delete_fine(fine_id):
    """Hard delete (payments go with it). Returns a snapshot of the deleted fine for the audit trail."""
    with transaction.atomic():
        fine = Fine.objects.select_for_update().filter(pk=fine_id).first()
        if not fine:
            raise NotFound('Fine not found')
        snapshot = {
            'id': fine.pk,
            'employee_id': fine.employee_id,
            'fine_cost': str(fine.fine_cost),
            'paid_amount': str(fine.paid_amount),
            'fine_date': str(fine.fine_date),
        }
        fine.delete()
    logger.info('Fine %s deleted (employee=%s)', fine_id, snapshot['employee_id'])
    return snapshot


def get_fine(fine_id):
    fine = Fine.objects.select_related('employee', 'car', 'delivery', 'payroll_period').filter(pk=fine_id).first()
    if not fine:
        raise NotFound('Fine not found')
    return fine


def _int_filter(value, field):
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'{field} must be an integer')


def fines_queryset(employee_id=None, car_id=None, pay_status=None, payroll_period_id=None,
                   year=None, month=None):
    """Filtered fines, newest fine_date first. Non-numeric id/year/month filters raise InvalidArgument."""
    employee_id = _int_filter(employee_id, 'employee_id')
    car_id = _int_filter(car_id, 'car_id')
    payroll_period_id = _int_filter(payroll_period_id, 'payroll_period_id')
    year = _int_filter(year, 'year')
    month = _int_filter(month, 'month')

    qs = Fine.objects.select_related('employee', 'car', 'delivery').order_by('-fine_date', '-id')
    if employee_id is not None:
        qs = qs.filter(employee_id=employee_id)
    if car_id is not None:
        qs = qs.filter(car_id=car_id)
    if pay_status:
        qs = qs.filter(pay_status=pay_status)
    if payroll_period_id is not None:
        qs = qs.filter(payroll_period_id=payroll_period_id)
    if year is not None:
        qs = qs.filter(fine_date__year=year)
        if month is not None:
            qs = qs.filter(fine_date__month=month)
    return qs
