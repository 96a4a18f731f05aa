"""
JWT issue and verify, plus decoding of the legacy base64 tokens.
Access token: sent on every API request. Refresh token: used only to obtain new access tokens.
A bearer token is decoded once into either JwtToken(claims) or LegacyToken(kind, ident) and then
resolved to an AuthenticatedPrincipal; nothing past the middleware sees raw tokens.
"""
import base64
import binascii
import time
from dataclasses import dataclass
from typing import Optional, Union

import jwt
from django.conf import settings

JWT_ALGORITHM = 'HS256'


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    id: str
    role: str
    employee_id: Optional[int] = None
    email: str = ''

    # DRF treats request.user as authenticated through this flag
    is_authenticated = True

    @property
    def is_admin(self):
        return self.role == 'admin'

    def as_dict(self):
        return {'id': self.id, 'role': self.role, 'employee_id': self.employee_id, 'email': self.email}


@dataclass(frozen=True)
class JwtToken:
    claims: dict


@dataclass(frozen=True)
class LegacyToken:
    kind: str  # "admin" | "employee"
    ident: str  # email for admin, employee id for employee


AuthToken = Union[JwtToken, LegacyToken]


def _secret():
    return getattr(settings, 'JWT_SECRET_KEY', None) or settings.SECRET_KEY


def _encode(payload, ttl_seconds):
    now = int(time.time())
    payload = dict(payload)
    payload['iat'] = now
    payload['exp'] = now + ttl_seconds
    payload['iss'] = settings.JWT_ISSUER
    payload['aud'] = settings.JWT_AUDIENCE
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def _claims_for(employee, token_type):
    return {
        'sub': str(employee.pk),
        'employee_id': employee.pk,
        'role': employee.role,
        'email': employee.email,
        'type': token_type,
    }


def encode_access(employee):
    """Return a JWT access token string for the given employee."""
    return _encode(_claims_for(employee, 'access'), settings.JWT_ACCESS_TTL)


def encode_refresh(employee):
    """Return a JWT refresh token string for the given employee."""
    return _encode(_claims_for(employee, 'refresh'), settings.JWT_REFRESH_TTL)


def decode_token(token):
    """
    Decode and validate a JWT. Returns payload dict or None if invalid/expired.
    """
    if not token or not isinstance(token, str):
        return None
    try:
        return jwt.decode(
            token.strip(),
            _secret(),
            algorithms=[JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except jwt.InvalidTokenError:
        return None


def _decode_legacy(token):
    try:
        raw = base64.b64decode(token, validate=True).decode('utf-8')
    except (binascii.Error, ValueError):
        return None
    parts = raw.split(':')
    if len(parts) < 2 or parts[0] not in ('admin', 'employee') or not parts[1]:
        return None
    return LegacyToken(kind=parts[0], ident=parts[1])


def parse_bearer(token) -> Optional[AuthToken]:
    """JwtToken for a valid JWT, LegacyToken for a well-formed legacy token, else None."""
    if not token or not isinstance(token, str):
        return None
    token = token.strip()
    if token.count('.') == 2:
        claims = decode_token(token)
        return JwtToken(claims) if claims is not None else None
    if getattr(settings, 'ALLOW_LEGACY_TOKENS', False):
        return _decode_legacy(token)
    return None


def principal_from_token(parsed: Optional[AuthToken]) -> Optional[AuthenticatedPrincipal]:
    """Resolve a decoded token to a principal. Employees must exist and be active."""
    from .models import Employee

    if parsed is None:
        return None
    if isinstance(parsed, LegacyToken):
        if parsed.kind == 'admin':
            # Legacy admin tokens carry only an email; it must belong to an active admin employee
            employee = Employee.objects.filter(
                email__iexact=parsed.ident, role=Employee.ROLE_ADMIN, status=Employee.STATUS_ACTIVE,
            ).first()
            if not employee:
                return None
            return AuthenticatedPrincipal(
                id=str(employee.pk), role=employee.role, employee_id=employee.pk, email=employee.email,
            )
        try:
            employee_id = int(parsed.ident)
        except ValueError:
            return None
    else:
        if parsed.claims.get('type') != 'access':
            return None
        try:
            employee_id = int(parsed.claims.get('employee_id'))
        except (TypeError, ValueError):
            return None

    employee = Employee.objects.filter(pk=employee_id).first()
    if not employee or not employee.is_active:
        return None
    return AuthenticatedPrincipal(
        id=str(employee.pk),
        role=employee.role or Employee.ROLE_DRIVER,
        employee_id=employee.pk,
        email=employee.email,
    )


def authenticate_bearer(token):
    return principal_from_token(parse_bearer(token))
