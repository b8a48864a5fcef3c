"""
Station queue endpoints.

Terminals poll ``GET /api/queue`` every few seconds and act on entries
with call-next, call, serve and skip.  Every mutation is a
compare-and-swap in the queue store, so a station that loses a race gets
``invalid_transition`` (or ``No items``) and simply re-polls.
"""
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from flow.features import require_enabled
from flow.permissions import IsStationStaff
from flow.serializers import validated
from flow.serializers.queue import BoardQuerySerializer, QueueQuerySerializer
from flow.services import queue_service
from flow.views import request_params


@api_view(['GET'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def queue_list(request):
    """Waiting and called entries of ``stage``, optionally scoped to ``doctorId``."""
    vd = validated(QueueQuerySerializer, request.query_params)
    return Response({'ok': True, 'data': queue_service.list_queue(vd['stage'], vd.get('doctorId'))})


@api_view(['POST'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def queue_call_next(request):
    vd = validated(QueueQuerySerializer, request_params(request))
    entry = queue_service.call_next(vd['stage'], vd.get('doctorId'), actor=request.user)
    if entry is None:
        return Response({'ok': True, 'data': None, 'message': 'No items'})
    return Response({'ok': True, 'data': entry})


@api_view(['POST'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def queue_call_entry(request, entry_id):
    return Response({'ok': True, 'data': queue_service.call_specific(entry_id, actor=request.user)})


@api_view(['POST'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def queue_serve_entry(request, entry_id):
    """Serving twice is accepted and returns the entry unchanged."""
    return Response({'ok': True, 'data': queue_service.serve_entry(entry_id, actor=request.user)})


@api_view(['POST'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def queue_skip_entry(request, entry_id):
    return Response({'ok': True, 'data': queue_service.skip_entry(entry_id, actor=request.user)})


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
@require_enabled('FLOW_ENABLE_TV_DISPLAY', 'Display')
def queue_board(request):
    """Waiting-room display snapshot; no login, no patient names."""
    vd = validated(BoardQuerySerializer, request.query_params)
    return Response({'ok': True, 'data': queue_service.get_board(vd['stage'])})
