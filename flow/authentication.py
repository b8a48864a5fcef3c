"""
Token authentication for station terminals.

Terminals log in once through ``/api/auth/login`` and send
``Authorization: Token <key>`` with every poll.  Kept in its own module so
that DRF can import it from settings without pulling in any views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication under a stable project import path."""

    keyword = 'Token'
