# Fleet back-office schema: trucks, employees, products, deliveries, expenses,
# fines + payments ledger, payroll periods/records, audit log.

from decimal import Decimal
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Truck',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('license_plate', models.CharField(max_length=32, unique=True)),
                ('model', models.CharField(max_length=100)),
                ('year', models.PositiveIntegerField()),
                ('status', models.CharField(
                    choices=[('active', 'Active'), ('maintenance', 'Maintenance'), ('inactive', 'Inactive')],
                    default='active', max_length=20,
                )),
                ('last_service', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'trucks',
                'ordering': ['license_plate'],
            },
        ),
        migrations.CreateModel(
            name='Employee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('license_number', models.CharField(blank=True, max_length=50)),
                ('hire_date', models.DateField(blank=True, null=True)),
                ('role', models.CharField(
                    choices=[('driver', 'Driver'), ('turnboy', 'Turnboy'), ('admin', 'Admin'), ('views', 'Views')],
                    default='driver', max_length=20,
                )),
                ('salary', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('status', models.CharField(
                    choices=[('active', 'Active'), ('inactive', 'Inactive'), ('suspended', 'Suspended')],
                    default='active', max_length=20,
                )),
                ('password', models.CharField(blank=True, max_length=128)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('truck', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='employees', to='core.truck',
                )),
            ],
            options={
                'db_table': 'employees',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('stock_quantity', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='PayrollPeriod',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField()),
                ('month', models.PositiveSmallIntegerField(help_text='1-12')),
                ('period_name', models.CharField(max_length=32)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField()),
                ('status', models.CharField(
                    choices=[('open', 'Open'), ('processed', 'Processed')], default='open', max_length=16,
                )),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('processed_by', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'payroll_periods',
                'ordering': ['-year', '-month'],
                'constraints': [
                    models.UniqueConstraint(fields=('year', 'month'), name='unique_payroll_period_month'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor_id', models.CharField(blank=True, db_index=True, max_length=64)),
                ('actor_email', models.CharField(blank=True, max_length=254)),
                ('actor_role', models.CharField(blank=True, max_length=20)),
                ('action', models.CharField(db_index=True, max_length=64)),
                ('module', models.CharField(db_index=True, max_length=64)),
                ('target_type', models.CharField(blank=True, max_length=64)),
                ('target_id', models.CharField(blank=True, max_length=100)),
                ('details', models.JSONField(blank=True, default=dict)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                'db_table': 'audit_log',
                'ordering': ['-created_at'],
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
            },
        ),
        migrations.CreateModel(
            name='Delivery',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delivery_code', models.CharField(max_length=50, unique=True)),
                ('origin', models.CharField(blank=True, max_length=255)),
                ('destination', models.CharField(blank=True, max_length=255)),
                ('quantity', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('delivery_date', models.DateField(db_index=True)),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'), ('in_transit', 'In transit'),
                        ('delivered', 'Delivered'), ('cancelled', 'Cancelled'),
                    ],
                    default='pending', max_length=20,
                )),
                ('total_income', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='deliveries', to='core.employee',
                )),
                ('product', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='deliveries', to='core.product',
                )),
                ('truck', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='deliveries', to='core.truck',
                )),
                ('turnboy', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='turnboy_deliveries', to='core.employee',
                )),
            ],
            options={
                'db_table': 'deliveries',
                'ordering': ['-delivery_date', '-id'],
                'verbose_name_plural': 'Deliveries',
            },
        ),
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('expense_type', models.CharField(default='other', max_length=50)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('expense_date', models.DateField(db_index=True)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('delivery', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='expenses', to='core.delivery',
                )),
                ('truck', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='expenses', to='core.truck',
                )),
            ],
            options={
                'db_table': 'expenses',
                'ordering': ['-expense_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Fine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('fine_type', models.CharField(max_length=100)),
                ('fine_date', models.DateField(db_index=True)),
                ('fine_cost', models.DecimalField(decimal_places=2, max_digits=14)),
                ('paid_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('remaining_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('pay_status', models.CharField(
                    choices=[('unpaid', 'Unpaid'), ('paid', 'Paid')], default='unpaid', max_length=16,
                )),
                ('description', models.TextField(blank=True)),
                ('created_by', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('car', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='fines', to='core.truck',
                )),
                ('delivery', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='fines', to='core.delivery',
                )),
                ('employee', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='fines', to='core.employee',
                )),
                ('payroll_period', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='fines', to='core.payrollperiod',
                )),
            ],
            options={
                'db_table': 'fines',
                'ordering': ['-fine_date', '-id'],
                'indexes': [
                    models.Index(fields=['employee', 'fine_date'], name='fines_employee_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('payment_date', models.DateTimeField(db_index=True)),
                ('notes', models.TextField(blank=True)),
                ('created_by', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('fine', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='core.fine',
                )),
                ('payroll_period', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='core.payrollperiod',
                )),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['-payment_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='PayrollRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('original_salary', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('total_fines', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('net_salary', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('processed', 'Processed')], default='pending', max_length=16,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='payroll_records', to='core.employee',
                )),
                ('payroll_period', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='records', to='core.payrollperiod',
                )),
            ],
            options={
                'db_table': 'payroll_records',
                'ordering': ['employee__name'],
                'constraints': [
                    models.UniqueConstraint(fields=('payroll_period', 'employee'), name='unique_period_employee'),
                ],
            },
        ),
    ]
