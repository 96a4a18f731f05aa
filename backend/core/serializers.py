from rest_framework import serializers

from .exceptions import Conflict
from .models import (
    AuditLog, Delivery, Employee, Expense, Fine, Payment, PayrollPeriod, PayrollRecord, Product, Truck,
)
from .payroll_periods import MAX_YEAR, MIN_YEAR


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class TruckSerializer(serializers.ModelSerializer):
    class Meta:
        model = Truck
        fields = ['id', 'license_plate', 'model', 'year', 'status', 'last_service', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class TruckSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Truck
        fields = ['id', 'license_plate', 'model', 'year', 'status']


class EmployeeSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ['id', 'name', 'email', 'phone', 'license_number', 'role', 'salary']


class EmployeeSerializer(serializers.ModelSerializer):
    """Employee CRUD. password is write-only and stored hashed; truck assignment is exclusive among active staff."""
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    truck = TruckSummarySerializer(read_only=True)
    truck_id = serializers.PrimaryKeyRelatedField(
        source='truck', queryset=Truck.objects.all(), required=False, allow_null=True
    )

    class Meta:
        model = Employee
        fields = [
            'id', 'name', 'email', 'phone', 'license_number', 'hire_date', 'role', 'salary',
            'status', 'truck', 'truck_id', 'password', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        truck = attrs.get('truck', getattr(self.instance, 'truck', None))
        status = attrs.get('status', getattr(self.instance, 'status', Employee.STATUS_ACTIVE))
        if truck is not None and status == Employee.STATUS_ACTIVE:
            taken = Employee.objects.filter(truck=truck, status=Employee.STATUS_ACTIVE)
            if self.instance is not None:
                taken = taken.exclude(pk=self.instance.pk)
            holder = taken.first()
            if holder:
                raise Conflict(f'Truck {truck.license_plate} is already assigned to {holder.name}')
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password', '')
        employee = Employee(**validated_data)
        if password:
            employee.set_password(password)
        employee.save()
        return employee

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ['id', 'name', 'category', 'unit_price', 'stock_quantity', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class DeliverySerializer(serializers.ModelSerializer):
    class Meta:
        model = Delivery
        fields = [
            'id', 'delivery_code', 'truck', 'employee', 'turnboy', 'product', 'origin', 'destination',
            'quantity', 'delivery_date', 'status', 'total_income', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class DeliverySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Delivery
        fields = ['id', 'delivery_code', 'origin', 'destination']


class ExpenseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Expense
        fields = [
            'id', 'truck', 'delivery', 'expense_type', 'amount', 'expense_date', 'description',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


# ---------- Fines & payments ----------
class FineSerializer(serializers.ModelSerializer):
    """Fine with computed balance fields and nested employee/truck/delivery summaries."""
    truck = TruckSummarySerializer(source='car', read_only=True)
    employee = EmployeeSummarySerializer(read_only=True)
    delivery = DeliverySummarySerializer(read_only=True)

    class Meta:
        model = Fine
        fields = [
            'id', 'car_id', 'employee_id', 'delivery_id', 'fine_type', 'fine_date', 'fine_cost',
            'paid_amount', 'remaining_amount', 'pay_status', 'payroll_period_id', 'description',
            'created_at', 'updated_at', 'truck', 'employee', 'delivery',
        ]
        read_only_fields = fields


class FineCreateSerializer(serializers.Serializer):
    car_id = serializers.IntegerField()
    employee_id = serializers.IntegerField()
    fine_type = serializers.CharField(max_length=100)
    fine_date = serializers.DateField()
    fine_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    delivery_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FineUpdateSerializer(serializers.Serializer):
    car_id = serializers.IntegerField(required=False)
    employee_id = serializers.IntegerField(required=False)
    fine_type = serializers.CharField(max_length=100, required=False)
    fine_date = serializers.DateField(required=False)
    fine_cost = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    delivery_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FineBalanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Fine
        fields = ['id', 'fine_cost', 'paid_amount', 'remaining_amount', 'pay_status']


class PaymentCreateSerializer(serializers.Serializer):
    # Shape only; amount > 0 and amount <= remaining are checked by payment_logic
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_date = serializers.DateTimeField(
        required=False, allow_null=True, input_formats=['iso-8601', '%Y-%m-%d']
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# ---------- Payroll ----------
class PayrollPeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayrollPeriod
        fields = [
            'id', 'year', 'month', 'period_name', 'start_date', 'end_date', 'status',
            'processed_at', 'processed_by', 'created_at',
        ]


class PaymentSerializer(serializers.ModelSerializer):
    payroll_period = PayrollPeriodSerializer(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'fine_id', 'amount', 'payment_date', 'payroll_period_id', 'payroll_period',
            'notes', 'created_by', 'created_at',
        ]


class PayrollRecordSerializer(serializers.ModelSerializer):
    employee = EmployeeSummarySerializer(read_only=True)
    truck = serializers.SerializerMethodField()

    class Meta:
        model = PayrollRecord
        fields = [
            'id', 'payroll_period_id', 'employee_id', 'employee', 'truck', 'original_salary',
            'total_fines', 'net_salary', 'status', 'created_at', 'updated_at',
        ]

    def get_truck(self, obj):
        truck = obj.employee.truck if obj.employee_id else None
        return TruckSummarySerializer(truck).data if truck else None


class PayrollPeriodDetailSerializer(PayrollPeriodSerializer):
    """Period with nested records and fine/record counts."""
    records = serializers.SerializerMethodField()
    fine_count = serializers.SerializerMethodField()
    record_count = serializers.SerializerMethodField()

    class Meta(PayrollPeriodSerializer.Meta):
        fields = PayrollPeriodSerializer.Meta.fields + ['records', 'fine_count', 'record_count']

    def get_records(self, obj):
        qs = obj.records.select_related('employee', 'employee__truck').order_by('employee__name')
        return PayrollRecordSerializer(qs, many=True).data

    def get_fine_count(self, obj):
        return obj.fines.count()

    def get_record_count(self, obj):
        return obj.records.count()


class PayrollPeriodListSerializer(PayrollPeriodSerializer):
    fine_count = serializers.IntegerField(read_only=True)
    record_count = serializers.IntegerField(read_only=True)

    class Meta(PayrollPeriodSerializer.Meta):
        fields = PayrollPeriodSerializer.Meta.fields + ['fine_count', 'record_count']


class ProcessMonthEndSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=MIN_YEAR, max_value=MAX_YEAR)
    month = serializers.IntegerField(min_value=1, max_value=12)


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = [
            'id', 'actor_id', 'actor_email', 'actor_role', 'action', 'module', 'target_type',
            'target_id', 'details', 'ip_address', 'user_agent', 'created_at',
        ]
        read_only_fields = fields
