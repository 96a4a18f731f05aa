import logging
import math

from django.db.models import Count, Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from .audit_logging import log_activity
from .exceptions import NotFound
from .fine_logic import create_fine, delete_fine, fines_queryset, get_fine, update_fine
from .jwt_auth import AuthenticatedPrincipal, decode_token, encode_access, encode_refresh
from .login_lockout import clear_failed_attempts, lockout_remaining, record_failed_attempt
from .models import AuditLog, Delivery, Employee, Expense, PayrollPeriod, PayrollRecord, Product, Truck
from .payment_logic import payment_history, record_payment
from .payroll_logic import process_month_end
from .payroll_periods import current_period
from .permissions import (
    IsAdminOrReadOnly, IsAdminRole, IsBackOffice, get_request_principal, is_staff_member,
)
from .reports import monthly_summary
from .serializers import (
    AuditLogSerializer, DeliverySerializer, EmployeeSerializer, EmployeeSummarySerializer,
    ExpenseSerializer, FineBalanceSerializer, FineCreateSerializer, FineSerializer,
    FineUpdateSerializer, LoginSerializer, PaymentCreateSerializer, PaymentSerializer,
    PayrollPeriodDetailSerializer, PayrollPeriodListSerializer, PayrollRecordSerializer,
    ProcessMonthEndSerializer, ProductSerializer, RefreshSerializer, TruckSerializer,
)

logger = logging.getLogger(__name__)


def _actor_id(request):
    """Employee id of the acting principal, or None when there is none."""
    principal = get_request_principal(request)
    return principal.employee_id if principal else None


def _check_fine_access(request, fine):
    """Drivers/turnboys may only touch their own fines."""
    principal = get_request_principal(request)
    if is_staff_member(principal) and fine.employee_id != principal.employee_id:
        return Response({'error': 'Not allowed'}, status=403)
    return None


# ---------- Auth ----------
class LoginView(APIView):
    """Email + password login for employees. Returns access + refresh JWTs and the user profile."""
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        ser = LoginSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        email = ser.validated_data['email'].strip().lower()

        remaining = lockout_remaining(email)
        if remaining:
            minutes = math.ceil(remaining / 60)
            return Response({
                'success': False,
                'error': f'Account locked due to too many failed login attempts. Please try again in {minutes} minutes.',
            }, status=429)

        employee = Employee.objects.filter(email__iexact=email).first()
        if not employee or not employee.is_active or not employee.check_password(ser.validated_data['password']):
            attempts = record_failed_attempt(email)
            logger.info('Failed login for %s (attempt %s)', email, attempts)
            return Response({'success': False, 'error': 'Invalid email or password'}, status=401)

        clear_failed_attempts(email)
        principal = AuthenticatedPrincipal(
            id=str(employee.pk), role=employee.role, employee_id=employee.pk, email=employee.email,
        )
        log_activity(request, 'login', 'auth', 'employee', employee.pk, details={'email': employee.email}, principal=principal)
        return Response({
            'success': True,
            'message': 'Login successful',
            'user': EmployeeSummarySerializer(employee).data,
            'access': encode_access(employee),
            'refresh': encode_refresh(employee),
        })


class RefreshTokenView(APIView):
    """POST { "refresh": "<refresh_token>" } -> { "access": "<new_access_token>" }. No auth required."""
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        ser = RefreshSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        payload = decode_token(ser.validated_data['refresh'])
        if not payload or payload.get('type') != 'refresh':
            return Response({'error': 'Invalid or expired refresh token'}, status=401)
        employee = Employee.objects.filter(pk=payload.get('employee_id')).first()
        if not employee or not employee.is_active:
            return Response({'error': 'Employee no longer exists or is inactive'}, status=401)
        return Response({'access': encode_access(employee)})


class MeView(APIView):
    def get(self, request):
        principal = get_request_principal(request)
        data = {'success': True, 'user': principal.as_dict()}
        if principal.employee_id:
            employee = Employee.objects.filter(pk=principal.employee_id).first()
            if employee:
                data['employee'] = EmployeeSerializer(employee).data
        return Response(data)


class VerifyTokenView(APIView):
    """GET with Authorization: Bearer <token> -> { success, user } while the token is valid."""
    permission_classes = []

    def get(self, request):
        principal = get_request_principal(request)
        if principal is None:
            return Response({'success': False, 'error': 'No token provided'}, status=401)
        return Response({'success': True, 'user': principal.as_dict()})


class LogoutView(APIView):
    """Tokens are stateless; the client drops them. Logged for the audit trail."""

    def post(self, request):
        log_activity(request, 'logout', 'auth')
        return Response({'success': True, 'message': 'Logout successful'})


# ---------- CRUD ViewSets ----------
class AuditedModelViewSet(viewsets.ModelViewSet):
    """ModelViewSet that writes an audit row for create/update/delete."""
    permission_classes = [IsBackOffice]
    filter_backends = [DjangoFilterBackend]
    audit_module = ''
    audit_target = ''

    def perform_create(self, serializer):
        obj = serializer.save()
        log_activity(self.request, 'create', self.audit_module, self.audit_target, obj.pk)

    def perform_update(self, serializer):
        obj = serializer.save()
        log_activity(self.request, 'update', self.audit_module, self.audit_target, obj.pk,
                     details={'updated': sorted(k for k in serializer.validated_data if k != 'password')})

    def perform_destroy(self, instance):
        pk = instance.pk
        instance.delete()
        log_activity(self.request, 'delete', self.audit_module, self.audit_target, pk)


class EmployeeViewSet(AuditedModelViewSet):
    queryset = Employee.objects.select_related('truck').all()
    serializer_class = EmployeeSerializer
    filterset_fields = ['role', 'status', 'truck']
    audit_module = 'employees'
    audit_target = 'employee'

    def get_queryset(self):
        qs = super().get_queryset()
        search = self.request.query_params.get('search', '').strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search) | Q(phone__icontains=search))
        return qs


class TruckViewSet(AuditedModelViewSet):
    queryset = Truck.objects.all()
    serializer_class = TruckSerializer
    filterset_fields = ['status']
    audit_module = 'trucks'
    audit_target = 'truck'


class ProductViewSet(AuditedModelViewSet):
    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    filterset_fields = ['category']
    audit_module = 'products'
    audit_target = 'product'


class DeliveryViewSet(AuditedModelViewSet):
    queryset = Delivery.objects.all()
    serializer_class = DeliverySerializer
    filterset_fields = ['status', 'truck', 'employee', 'delivery_date']
    audit_module = 'deliveries'
    audit_target = 'delivery'


class ExpenseViewSet(AuditedModelViewSet):
    queryset = Expense.objects.all()
    serializer_class = ExpenseSerializer
    filterset_fields = ['expense_type', 'truck', 'expense_date']
    audit_module = 'expenses'
    audit_target = 'expense'


# ---------- Fines ----------
class FineListCreateView(APIView):
    """GET: fines (filters: employee_id, car_id, pay_status, payroll_period_id, year, month). POST: record a fine."""
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        principal = get_request_principal(request)
        params = request.query_params
        employee_id = params.get('employee_id', '').strip() or None
        if is_staff_member(principal):
            employee_id = principal.employee_id
        qs = fines_queryset(
            employee_id=employee_id,
            car_id=params.get('car_id', '').strip() or None,
            pay_status=params.get('pay_status', '').strip() or None,
            payroll_period_id=params.get('payroll_period_id', '').strip() or None,
            year=params.get('year', '').strip() or None,
            month=params.get('month', '').strip() or None,
        )
        return Response(FineSerializer(qs, many=True).data)

    def post(self, request):
        ser = FineCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        fine = create_fine(
            employee_id=data['employee_id'],
            car_id=data['car_id'],
            fine_type=data['fine_type'],
            fine_date=data['fine_date'],
            fine_cost=data['fine_cost'],
            delivery_id=data.get('delivery_id'),
            description=data.get('description') or '',
            created_by=_actor_id(request),
        )
        log_activity(request, 'create', 'fines', 'fine', fine.pk, details={
            'employee_id': fine.employee_id, 'fine_cost': str(fine.fine_cost), 'fine_date': str(fine.fine_date),
        })
        return Response(FineSerializer(get_fine(fine.pk)).data, status=201)


class FineDetailView(APIView):
    """Get, update, or delete a fine."""
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, pk):
        fine = get_fine(pk)
        denied = _check_fine_access(request, fine)
        if denied:
            return denied
        return Response(FineSerializer(fine).data)

    def put(self, request, pk):
        ser = FineUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        fine = update_fine(pk, **ser.validated_data)
        log_activity(request, 'update', 'fines', 'fine', fine.pk, details={
            'updated': sorted(ser.validated_data.keys()), 'fine_cost': str(fine.fine_cost),
        })
        return Response(FineSerializer(get_fine(fine.pk)).data)

    patch = put

    def delete(self, request, pk):
        snapshot = delete_fine(pk)
        log_activity(request, 'delete', 'fines', 'fine', pk, details=snapshot)
        return Response(status=204)


class FinePaymentsView(APIView):
    """GET: payment history of a fine. POST: record a partial/full payment."""
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, pk):
        fine, payments, total_paid = payment_history(pk)
        denied = _check_fine_access(request, fine)
        if denied:
            return denied
        return Response({
            'fine': FineBalanceSerializer(fine).data,
            'payments': PaymentSerializer(payments, many=True).data,
            'total_paid': total_paid,
        })

    def post(self, request, pk):
        ser = PaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        payment, fine = record_payment(
            pk,
            data['amount'],
            payment_date=data.get('payment_date'),
            notes=data.get('notes') or '',
            created_by=_actor_id(request),
        )
        log_activity(request, 'pay', 'payments', 'fine', fine.pk, details={
            'payment_id': payment.pk, 'amount': str(payment.amount), 'remaining': str(fine.remaining_amount),
        })
        return Response({
            'message': 'Payment recorded successfully',
            'payment': PaymentSerializer(payment).data,
            'fine': FineSerializer(get_fine(fine.pk)).data,
        }, status=201)


# ---------- Payroll ----------
class CurrentPeriodView(APIView):
    """This month's period (created on first access) with records and fine count."""
    permission_classes = [IsBackOffice]

    def get(self, request):
        return Response(PayrollPeriodDetailSerializer(current_period()).data)


class PayrollPeriodListView(APIView):
    permission_classes = [IsBackOffice]

    def get(self, request):
        periods = PayrollPeriod.objects.annotate(
            fine_count=Count('fines', distinct=True),
            record_count=Count('records', distinct=True),
        ).order_by('-year', '-month')
        return Response(PayrollPeriodListSerializer(periods, many=True).data)


class ProcessMonthEndView(APIView):
    """POST { year, month }: snapshot payroll records for the month and mark the period processed."""
    permission_classes = [IsAdminRole]

    def post(self, request):
        if request.data.get('year') in (None, '') or request.data.get('month') in (None, ''):
            return Response({'error': 'Year and month are required'}, status=400)
        ser = ProcessMonthEndSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        year, month = ser.validated_data['year'], ser.validated_data['month']
        period, records_created = process_month_end(year, month, actor_id=_actor_id(request))
        log_activity(request, 'process', 'payroll', 'payroll_period', period.pk, details={
            'year': year, 'month': month, 'records_created': records_created,
        })
        return Response({
            'message': 'Month-end processed successfully',
            'period': PayrollPeriodDetailSerializer(period).data,
            'recordsCreated': records_created,
        })


class PeriodRecordsView(APIView):
    permission_classes = [IsBackOffice]

    def get(self, request, period_id):
        if not PayrollPeriod.objects.filter(pk=period_id).exists():
            raise NotFound('Payroll period not found')
        records = PayrollRecord.objects.filter(payroll_period_id=period_id).select_related(
            'employee', 'employee__truck',
        ).order_by('employee__name')
        return Response(PayrollRecordSerializer(records, many=True).data)


class MonthlySummaryView(APIView):
    permission_classes = [IsBackOffice]

    def get(self, request):
        year = request.query_params.get('year', '').strip()
        month = request.query_params.get('month', '').strip()
        if not year or not month:
            return Response({'error': 'Year and month are required'}, status=400)
        return Response(monthly_summary(year, month))


# ---------- Audit log (admin only) ----------
class AuditLogListView(APIView):
    """List activity logs with optional filters (module, action, actor_id, limit)."""
    permission_classes = [IsAdminRole]

    def get(self, request):
        qs = AuditLog.objects.all().order_by('-created_at')
        module = request.query_params.get('module', '').strip()
        action = request.query_params.get('action', '').strip()
        actor_id = request.query_params.get('actor_id', '').strip()
        if module:
            qs = qs.filter(module=module)
        if action:
            qs = qs.filter(action=action)
        if actor_id:
            qs = qs.filter(actor_id=actor_id)
        try:
            limit = min(int(request.query_params.get('limit', 200)), 500)
        except ValueError:
            limit = 200
        logs = AuditLogSerializer(qs[:limit], many=True).data
        return Response({'results': logs, 'count': len(logs)})
