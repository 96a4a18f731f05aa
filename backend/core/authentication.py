from rest_framework.authentication import BaseAuthentication


class PrincipalAuthentication(BaseAuthentication):
    """Expose the principal set by BearerAuthMiddleware as request.user."""

    def authenticate(self, request):
        principal = getattr(request._request, 'principal', None)
        if principal is None:
            return None
        return (principal, None)

    def authenticate_header(self, request):
        return 'Bearer'
