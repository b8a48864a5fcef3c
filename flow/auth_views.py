"""
Login endpoint for station terminals.

Returns a DRF token together with the operator's role so that a terminal
can decide which station screen to open.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from flow.serializers.auth import LoginSerializer

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def login_view(request):
    """
    Username/password login.
    Accepts fields:
      - username
      - password
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    user = authenticate(request, username=vd['username'], password=vd['password'])
    if not user:
        logger.warning('Login failed', extra={'event': 'login_failed', 'username': vd['username']})
        return Response({'ok': False, 'error': {'code': 'invalid_credentials', 'message': 'Invalid username or password'}}, status=400)

    token_obj, _ = Token.objects.get_or_create(user=user)
    logger.info('Login succeeded', extra={'event': 'login', 'user_id': user.id, 'role': user.role})
    return Response({
        'ok': True,
        'data': {
            'token': token_obj.key,
            'role': user.role,
            'userId': user.id,
            'name': user.get_full_name() or user.username,
        },
    })


# DRF ScopedRateThrottle reads throttle_scope from the wrapped view class
login_view.cls.throttle_scope = 'login'
