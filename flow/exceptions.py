"""
Domain errors raised by the queue core and the DRF handler that renders them.

Every error reaching a station has the shape
``{"ok": false, "error": {"code": ..., "message": ...}}``.
"""
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class FlowError(Exception):
    """Base class for errors that surface directly to the calling station."""
    code = 'flow_error'
    status_code = 400

    def __init__(self, message: str = ''):
        super().__init__(message or self.code)
        self.message = message or self.code


class NotFound(FlowError):
    """Unknown visit, entry, patient or doctor."""
    code = 'not_found'
    status_code = 404


class InvalidTransition(FlowError):
    """Illegal stage edge, action on a terminal entry, or a lost race."""
    code = 'invalid_transition'
    status_code = 409


class ValidationFailed(FlowError):
    """Request values outside their allowed domain or range."""
    code = 'validation_failed'
    status_code = 400


class ModuleDisabled(FlowError):
    code = 'module_disabled'
    status_code = 404


def api_exception_handler(exc, context):
    if isinstance(exc, FlowError):
        return Response({'ok': False, 'error': {'code': exc.code, 'message': exc.message}}, status=exc.status_code)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.error('Unhandled error in %s', context.get('view').__class__.__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)
