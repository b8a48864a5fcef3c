"""
Module switches for the queue, triage and waiting-room display endpoints.
"""
from functools import wraps

from django.conf import settings

from flow.exceptions import ModuleDisabled


def require_enabled(flag: str, label: str):
    """Reject calls to a view while ``settings.<flag>`` is off."""
    def decorator(func):
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            if not getattr(settings, flag, False):
                raise ModuleDisabled(f"{label} module disabled")
            return func(request, *args, **kwargs)
        return wrapper
    return decorator
