"""
Role guards. Reads need any authenticated principal; mutations of fines, payments and
payroll need the admin role. Drivers/turnboys are scoped to their own records in the views.
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission

from .jwt_auth import AuthenticatedPrincipal

STAFF_ROLES = ('driver', 'turnboy')


def get_request_principal(request):
    user = getattr(request, 'user', None)
    return user if isinstance(user, AuthenticatedPrincipal) else None


def is_staff_member(principal):
    """Drivers and turnboys only see data about themselves."""
    return principal is not None and principal.role in STAFF_ROLES


class IsAuthenticatedPrincipal(BasePermission):
    message = 'Not authenticated'

    def has_permission(self, request, view):
        return get_request_principal(request) is not None


class IsAdminRole(BasePermission):
    message = 'Admin role required'

    def has_permission(self, request, view):
        principal = get_request_principal(request)
        return principal is not None and principal.is_admin


class IsAdminOrReadOnly(BasePermission):
    """Any authenticated principal may read; only admins may write."""
    message = 'Admin role required'

    def has_permission(self, request, view):
        principal = get_request_principal(request)
        if principal is None:
            return False
        if request.method in SAFE_METHODS:
            return True
        return principal.is_admin


class IsBackOffice(BasePermission):
    """Back-office screens: admin and views roles may read, only admin may write."""
    message = 'Back-office role required'

    def has_permission(self, request, view):
        principal = get_request_principal(request)
        if principal is None or is_staff_member(principal):
            return False
        if request.method in SAFE_METHODS:
            return True
        return principal.is_admin
