"""
Structured logging that keeps clinical free text out of log lines.

Provides the correlation filter and JSON formatter referenced from the
``LOGGING`` setting, plus :func:`log_flow_event` for queue domain events.
"""
import json
import logging
from datetime import datetime, timezone

from .correlation import get_request_id

# Keys that are never written to logs verbatim
SENSITIVE_FIELDS = {
    'password',
    'token',
    'secret',
    'authorization',
    'symptoms',
    'allergies',
    'current_meds',
    'currentmeds',
    'notes',
    'phone',
    'email',
}

_RESERVED = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message', 'asctime',
}

logger = logging.getLogger('flow.events')


class CorrelationFilter(logging.Filter):
    """Inject the current request id into every record."""

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        return True


class SanitizedJSONFormatter(logging.Formatter):
    """Render records as one JSON object per line with sensitive keys redacted."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
        }
        for key, value in record.__dict__.items():
            if key in log_data or key in _RESERVED or key.startswith('_'):
                continue
            log_data[key] = '[REDACTED]' if key.lower() in SENSITIVE_FIELDS else sanitize(value)
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def sanitize(value):
    """Return a copy of ``value`` with sensitive dictionary keys redacted."""
    if isinstance(value, dict):
        return {
            k: '[REDACTED]' if str(k).lower() in SENSITIVE_FIELDS else sanitize(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [sanitize(v) for v in value]
    return value


def log_flow_event(event_name: str, result: str = 'success', **fields) -> None:
    """Log one queue domain event.

    ``result`` is ``success`` or ``rejected``; rejected operations (lost
    races, illegal transitions) are logged at warning level.

    Example::

        log_flow_event('entry_called', entry_id=str(entry.id), stage='triage')
    """
    event_data = {'event': event_name, 'result': result}
    event_data.update(sanitize(fields))
    if result == 'success':
        logger.info('Flow event: %s', event_name, extra=event_data)
    else:
        logger.warning('Flow event: %s', event_name, extra=event_data)
