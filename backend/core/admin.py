from django.contrib import admin
from .models import (
    AuditLog, Delivery, Employee, Expense, Fine, Payment, PayrollPeriod, PayrollRecord, Product, Truck,
)


@admin.register(Truck)
class TruckAdmin(admin.ModelAdmin):
    list_display = ('id', 'license_plate', 'model', 'year', 'status', 'last_service')
    list_filter = ('status',)
    search_fields = ('license_plate', 'model')


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'email', 'role', 'status', 'salary', 'truck')
    list_filter = ('role', 'status')
    search_fields = ('name', 'email', 'phone')
    exclude = ('password',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'category', 'unit_price', 'stock_quantity')


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ('delivery_code', 'delivery_date', 'truck', 'employee', 'status', 'total_income')
    list_filter = ('status', 'delivery_date')
    search_fields = ('delivery_code', 'origin', 'destination')


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('id', 'expense_type', 'amount', 'expense_date', 'truck')
    list_filter = ('expense_type', 'expense_date')


@admin.register(PayrollPeriod)
class PayrollPeriodAdmin(admin.ModelAdmin):
    list_display = ('period_name', 'year', 'month', 'status', 'processed_at', 'processed_by')
    list_filter = ('status', 'year')


@admin.register(Fine)
class FineAdmin(admin.ModelAdmin):
    list_display = ('id', 'employee', 'car', 'fine_type', 'fine_date', 'fine_cost', 'paid_amount', 'remaining_amount', 'pay_status')
    list_filter = ('pay_status', 'fine_date')
    search_fields = ('fine_type', 'description')
    readonly_fields = ('paid_amount', 'remaining_amount', 'pay_status')


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'fine', 'amount', 'payment_date', 'payroll_period', 'created_by')
    list_filter = ('payment_date',)


@admin.register(PayrollRecord)
class PayrollRecordAdmin(admin.ModelAdmin):
    list_display = ('payroll_period', 'employee', 'original_salary', 'total_fines', 'net_salary', 'status')
    list_filter = ('status', 'payroll_period')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'actor_email', 'actor_role', 'action', 'module', 'target_type', 'target_id')
    list_filter = ('module', 'action')
    search_fields = ('actor_email', 'target_id')
