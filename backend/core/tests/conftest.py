"""
Pytest fixtures and factories for the fleet back-office tests.
"""
import base64
import itertools
from datetime import date
from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.fine_logic import create_fine
from core.jwt_auth import encode_access
from core.models import Employee, Truck


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


# Entity factories
@pytest.fixture
def truck_factory(db):
    counter = itertools.count(1)

    def create_truck(**kwargs):
        n = next(counter)
        defaults = {
            'license_plate': f'KDA {n:03d}A',
            'model': 'Isuzu FRR',
            'year': 2020,
        }
        defaults.update(kwargs)
        return Truck.objects.create(**defaults)

    return create_truck


@pytest.fixture
def employee_factory(db):
    counter = itertools.count(1)

    def create_employee(password=None, **kwargs):
        n = next(counter)
        defaults = {
            'name': f'Employee {n:02d}',
            'email': f'employee{n}@fleet.test',
            'role': Employee.ROLE_DRIVER,
            'salary': Decimal('50000'),
            'status': Employee.STATUS_ACTIVE,
        }
        defaults.update(kwargs)
        employee = Employee(**defaults)
        if password:
            employee.set_password(password)
        employee.save()
        return employee

    return create_employee


@pytest.fixture
def fine_factory(db):
    def make_fine(employee, truck, fine_cost='10000', fine_date=date(2025, 11, 15), **kwargs):
        return create_fine(
            employee_id=employee.pk,
            car_id=truck.pk,
            fine_type=kwargs.pop('fine_type', 'Speeding'),
            fine_date=fine_date,
            fine_cost=fine_cost,
            **kwargs
        )

    return make_fine


@pytest.fixture
def truck(truck_factory):
    return truck_factory()


@pytest.fixture
def driver(employee_factory, truck):
    return employee_factory(name='Alice Driver', email='alice@fleet.test', truck=truck, password='secret123')


@pytest.fixture
def admin_employee(employee_factory):
    return employee_factory(
        name='Ada Admin', email='admin@fleet.test', role=Employee.ROLE_ADMIN, salary=Decimal('0'), password='admin123',
    )


# HTTP clients
@pytest.fixture
def api_client():
    return APIClient()


def _client_for(employee):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {encode_access(employee)}')
    return client


@pytest.fixture
def admin_client(admin_employee):
    return _client_for(admin_employee)


@pytest.fixture
def driver_client(driver):
    return _client_for(driver)


@pytest.fixture
def views_client(employee_factory):
    return _client_for(employee_factory(role=Employee.ROLE_VIEWS, email='viewer@fleet.test'))


@pytest.fixture
def legacy_token(settings):
    settings.ALLOW_LEGACY_TOKENS = True

    def encode(raw):
        return base64.b64encode(raw.encode('utf-8')).decode('ascii')

    return encode
