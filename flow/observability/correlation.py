"""
Request correlation middleware.

Generates or propagates ``X-Request-ID`` and keeps it in thread-local
storage so that log records emitted by the queue core carry the id of the
station request that caused them.
"""
import logging
import time
import uuid
from threading import local

from django.utils.deprecation import MiddlewareMixin

_request_context = local()

logger = logging.getLogger(__name__)


def get_request_id():
    """Return the current request id, if any."""
    return getattr(_request_context, 'request_id', None)


class RequestCorrelationMiddleware(MiddlewareMixin):
    """Attach a request id to every request and echo it in the response."""

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'

    def process_request(self, request):
        request_id = request.META.get(self.REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.request_id = request_id
        request.start_time = time.time()
        _request_context.request_id = request_id

    def process_response(self, request, response):
        if hasattr(request, 'request_id'):
            response['X-Request-ID'] = request.request_id
        if hasattr(request, 'start_time'):
            duration_ms = (time.time() - request.start_time) * 1000
            logger.debug(
                'Request completed',
                extra={
                    'event': 'http_request_completed',
                    'path': request.path,
                    'method': request.method,
                    'status_code': response.status_code,
                    'duration_ms': round(duration_ms, 2),
                },
            )
        clear_request_context()
        return response


def clear_request_context():
    """Drop the thread-local request id."""
    if hasattr(_request_context, 'request_id'):
        delattr(_request_context, 'request_id')
