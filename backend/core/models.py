"""
Fleet back-office - Database Models.
Trucks, staff, products, deliveries, expenses, traffic fines with their payment ledger,
and the monthly payroll periods/records that net fines against base salary.
"""
from calendar import monthrange
from datetime import date
from decimal import Decimal

from django.contrib.auth.hashers import check_password, make_password
from django.db import models


class Truck(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_MAINTENANCE = 'maintenance'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_MAINTENANCE, 'Maintenance'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    license_plate = models.CharField(max_length=32, unique=True)
    model = models.CharField(max_length=100)
    year = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    last_service = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trucks'
        ordering = ['license_plate']

    def __str__(self):
        return f"{self.license_plate} ({self.model})"


class Employee(models.Model):
    """Staff member. `salary` is the base (original) salary and is never touched by fines or payments."""
    ROLE_DRIVER = 'driver'
    ROLE_TURNBOY = 'turnboy'
    ROLE_ADMIN = 'admin'
    ROLE_VIEWS = 'views'  # read-only back-office user
    ROLE_CHOICES = [
        (ROLE_DRIVER, 'Driver'),
        (ROLE_TURNBOY, 'Turnboy'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_VIEWS, 'Views'),
    ]
    # Roles that receive a payroll record at month-end
    PAYROLL_ROLES = (ROLE_DRIVER, ROLE_TURNBOY)

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_SUSPENDED = 'suspended'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_SUSPENDED, 'Suspended'),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    license_number = models.CharField(max_length=50, blank=True)
    hire_date = models.DateField(null=True, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_DRIVER)
    salary = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    # At most one active employee per truck; checked on assignment, not by the schema
    truck = models.ForeignKey(
        Truck, on_delete=models.SET_NULL, null=True, blank=True, related_name='employees'
    )
    password = models.CharField(max_length=128, blank=True)  # Django password hash
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'employees'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.role})"

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        if not self.password:
            return False
        return check_password(raw_password, self.password)


class Product(models.Model):
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    stock_quantity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['name']

    def __str__(self):
        return self.name


class Delivery(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_IN_TRANSIT = 'in_transit'
    STATUS_DELIVERED = 'delivered'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_TRANSIT, 'In transit'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    delivery_code = models.CharField(max_length=50, unique=True)
    truck = models.ForeignKey(Truck, on_delete=models.PROTECT, related_name='deliveries')
    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name='deliveries')
    turnboy = models.ForeignKey(
        Employee, on_delete=models.SET_NULL, null=True, blank=True, related_name='turnboy_deliveries'
    )
    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, null=True, blank=True, related_name='deliveries'
    )
    origin = models.CharField(max_length=255, blank=True)
    destination = models.CharField(max_length=255, blank=True)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    delivery_date = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    total_income = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'deliveries'
        ordering = ['-delivery_date', '-id']
        verbose_name_plural = 'Deliveries'

    def __str__(self):
        return f"{self.delivery_code} {self.delivery_date} {self.status}"


class Expense(models.Model):
    truck = models.ForeignKey(
        Truck, on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses'
    )
    delivery = models.ForeignKey(
        Delivery, on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses'
    )
    expense_type = models.CharField(max_length=50, default='other')  # fuel, maintenance, toll, ...
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    expense_date = models.DateField(db_index=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-id']

    def __str__(self):
        return f"{self.expense_type} {self.expense_date} {self.amount}"


class PayrollPeriod(models.Model):
    """Calendar-month accounting window. One row per (year, month); open -> processed, never back."""
    STATUS_OPEN = 'open'
    STATUS_PROCESSED = 'processed'
    STATUS_CHOICES = [
        (STATUS_OPEN, 'Open'),
        (STATUS_PROCESSED, 'Processed'),
    ]

    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField(help_text='1-12')
    period_name = models.CharField(max_length=32)  # e.g. "November 2025"
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_OPEN)
    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.IntegerField(null=True, blank=True)  # employee id of the closing admin
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payroll_periods'
        ordering = ['-year', '-month']
        constraints = [
            models.UniqueConstraint(fields=['year', 'month'], name='unique_payroll_period_month')
        ]

    def __str__(self):
        return f"{self.period_name} ({self.status})"

    @property
    def is_processed(self):
        return self.status == self.STATUS_PROCESSED

    def date_range(self):
        """First and last calendar day covered by this period."""
        _, last_day = monthrange(self.year, self.month)
        return date(self.year, self.month, 1), date(self.year, self.month, last_day)


class Fine(models.Model):
    """Traffic fine charged to an employee, with its own partial-payment ledger."""
    PAY_STATUS_UNPAID = 'unpaid'
    PAY_STATUS_PAID = 'paid'
    PAY_STATUS_CHOICES = [
        (PAY_STATUS_UNPAID, 'Unpaid'),
        (PAY_STATUS_PAID, 'Paid'),
    ]

    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name='fines')
    car = models.ForeignKey(Truck, on_delete=models.PROTECT, related_name='fines')
    delivery = models.ForeignKey(
        Delivery, on_delete=models.SET_NULL, null=True, blank=True, related_name='fines'
    )
    fine_type = models.CharField(max_length=100)
    fine_date = models.DateField(db_index=True)
    fine_cost = models.DecimalField(max_digits=14, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    remaining_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    pay_status = models.CharField(max_length=16, choices=PAY_STATUS_CHOICES, default=PAY_STATUS_UNPAID)
    # Period whose month contains fine_date
    payroll_period = models.ForeignKey(
        PayrollPeriod, on_delete=models.SET_NULL, null=True, blank=True, related_name='fines'
    )
    description = models.TextField(blank=True)
    created_by = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fines'
        ordering = ['-fine_date', '-id']
        indexes = [
            models.Index(fields=['employee', 'fine_date'], name='fines_employee_date_idx'),
        ]

    def __str__(self):
        return f"{self.employee_id} {self.fine_type} {self.fine_date} {self.fine_cost}"

    def apply_balance(self):
        """Recompute remaining_amount and pay_status from fine_cost and paid_amount."""
        paid = self.paid_amount or Decimal('0')
        self.remaining_amount = max(Decimal('0'), (self.fine_cost or Decimal('0')) - paid)
        self.pay_status = self.PAY_STATUS_PAID if self.remaining_amount <= 0 else self.PAY_STATUS_UNPAID

    def current_remaining(self):
        if self.remaining_amount is not None:
            return self.remaining_amount
        return (self.fine_cost or Decimal('0')) - (self.paid_amount or Decimal('0'))


class Payment(models.Model):
    """One partial or full settlement against a fine. Immutable once written."""
    fine = models.ForeignKey(Fine, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_date = models.DateTimeField(db_index=True)
    # Period containing payment_date (may differ from the fine's own period)
    payroll_period = models.ForeignKey(PayrollPeriod, on_delete=models.PROTECT, related_name='payments')
    notes = models.TextField(blank=True)
    created_by = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-payment_date', '-id']

    def __str__(self):
        return f"fine {self.fine_id} {self.amount} @ {self.payment_date}"


class PayrollRecord(models.Model):
    """Point-in-time payroll statement for one employee in one period. UNIQUE (period, employee)."""
    STATUS_PENDING = 'pending'
    STATUS_PROCESSED = 'processed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSED, 'Processed'),
    ]

    payroll_period = models.ForeignKey(PayrollPeriod, on_delete=models.PROTECT, related_name='records')
    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name='payroll_records')
    original_salary = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    total_fines = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    net_salary = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payroll_records'
        ordering = ['employee__name']
        constraints = [
            models.UniqueConstraint(fields=['payroll_period', 'employee'], name='unique_period_employee')
        ]

    def __str__(self):
        return f"{self.payroll_period_id}/{self.employee_id} net {self.net_salary}"


class AuditLog(models.Model):
    """Record of who did what and where in the application."""
    actor_id = models.CharField(max_length=64, blank=True, db_index=True)  # employee id or "admin"
    actor_email = models.CharField(max_length=254, blank=True)
    actor_role = models.CharField(max_length=20, blank=True)
    action = models.CharField(max_length=64, db_index=True)  # e.g. login, create, update, delete, process
    module = models.CharField(max_length=64, db_index=True)  # e.g. auth, fines, payments, payroll
    target_type = models.CharField(max_length=64, blank=True)  # e.g. fine, payment, payroll_period
    target_id = models.CharField(max_length=100, blank=True)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'audit_log'
        ordering = ['-created_at']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'

    def __str__(self):
        return f"{self.actor_email or self.actor_id} {self.action} {self.module} @ {self.created_at}"
