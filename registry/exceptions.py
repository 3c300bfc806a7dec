"""
Domain errors and the unified API exception handler.

Services raise the plain exceptions below; they know nothing about
HTTP.  :func:`api_exception_handler` (wired in ``REST_FRAMEWORK``)
turns them, and every DRF error, into the ``{'ok': False, 'error':
{...}}`` envelope the front-end expects.
"""
import logging

from django.db.models import ProtectedError
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    code = 'clinic_error'
    status_code = 400


class MissingSelection(ClinicError):
    """A required doctor/patient selection was not made."""
    code = 'missing_selection'
    status_code = 400


class MissingParent(ClinicError):
    """The immediate parent of an entity being created does not exist."""
    code = 'missing_parent'
    status_code = 404

    def __init__(self, kind: str, entity_id):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f'{kind.capitalize()} not found: {entity_id or "(none)"}')


class NotFoundError(ClinicError):
    code = 'not_found'
    status_code = 404

    def __init__(self, kind: str, entity_id):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f'{kind.capitalize()} not found')


def _error(code, message, status):
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=status)


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicError):
        return _error(exc.code, str(exc), exc.status_code)
    if isinstance(exc, ProtectedError):
        return _error('protected', 'Entity is still referenced by other records', 409)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return _error('server_error', str(exc), 500)
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return _error('api_error', detail, resp.status_code)
