"""
Domain errors raised by the fine/payment/payroll logic, and the DRF exception handler
that turns them into {"error": "..."} responses.
"""
import logging

from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class FleetError(Exception):
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(FleetError):
    """Referenced employee, fine, truck or period does not exist."""
    status_code = 404
    default_message = 'Not found'


class InvalidArgument(FleetError):
    """Bad input: non-positive amount, overpayment, missing required field."""
    status_code = 400
    default_message = 'Invalid argument'


class InvalidState(FleetError):
    """Operation not allowed in the entity's current state (e.g. period already processed)."""
    status_code = 400
    default_message = 'Invalid state'


class Conflict(FleetError):
    """Unique key or referential clash."""
    status_code = 409
    default_message = 'Conflict'


def api_exception_handler(exc, context):
    if isinstance(exc, FleetError):
        set_rollback()
        return Response({'error': exc.message}, status=exc.status_code)
    if isinstance(exc, ProtectedError):
        set_rollback()
        return Response({'error': 'Record is still referenced and cannot be deleted'}, status=409)
    if isinstance(exc, IntegrityError):
        set_rollback()
        logger.warning('Integrity error in %s: %s', _view_name(context), exc)
        return Response({'error': 'Conflicting record already exists'}, status=409)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    set_rollback()
    logger.exception('Unhandled error in %s', _view_name(context), exc_info=exc)
    return Response({'error': 'Internal server error'}, status=500)


def _view_name(context):
    view = (context or {}).get('view')
    return view.__class__.__name__ if view is not None else 'unknown view'
