"""
Central audit logging: record who did what and where.
Call log_activity() from views after successful actions.
"""
from .models import AuditLog


def _get_client_ip(request):
    if not request:
        return None
    xff = request.META.get('HTTP_X_FORWARDED_FOR')
    if xff:
        return xff.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def _get_user_agent(request):
    if not request:
        return ''
    return (request.META.get('HTTP_USER_AGENT') or '')[:500]


def log_activity(request, action, module, target_type='', target_id='', details=None, principal=None):
    """
    Log an action by the current principal (from the bearer token, or passed explicitly e.g. after login).
    action: e.g. login, create, update, delete, pay, process
    module: e.g. auth, fines, payments, payroll, employees
    target_type: e.g. fine, payment, payroll_period, employee
    target_id: e.g. record id
    details: optional dict for extra context
    """
    if principal is None and request is not None:
        principal = getattr(request, 'principal', None)
    AuditLog.objects.create(
        actor_id=principal.id if principal else '',
        actor_email=(principal.email or '') if principal else '',
        actor_role=principal.role if principal else '',
        action=action,
        module=module,
        target_type=target_type or '',
        target_id=str(target_id) if target_id else '',
        details=details or {},
        ip_address=_get_client_ip(request),
        user_agent=_get_user_agent(request),
    )
