"""
Bearer auth: set request.principal from the Authorization header; return 401 if a Bearer
token is present but invalid, expired, or belongs to an inactive employee.
"""
import logging

from django.http import JsonResponse

from .jwt_auth import authenticate_bearer

logger = logging.getLogger(__name__)


class BearerAuthMiddleware:
    """
    If request has Authorization: Bearer <token>, decode it (JWT or legacy base64) and set
    request.principal. Requests without a Bearer header get request.principal = None and are
    left to the view's permission classes.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.principal = None
        auth_header = request.headers.get('Authorization') or request.META.get('HTTP_AUTHORIZATION')
        if auth_header and auth_header.startswith('Bearer '):
            principal = authenticate_bearer(auth_header[7:].strip())
            if principal is None:
                logger.warning('Rejected bearer token on %s %s', request.method, request.path)
                return JsonResponse(
                    {'error': 'Invalid or expired token', 'code': 'token_invalid'},
                    status=401,
                )
            request.principal = principal
        return self.get_response(request)
