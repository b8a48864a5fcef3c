from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from flow.features import require_enabled
from flow.permissions import IsTriageRole
from flow.serializers import validated
from flow.serializers.triage import TriageRecordSerializer
from flow.services import queue_service


@api_view(['GET', 'PUT'])
@permission_classes([IsTriageRole])
@require_enabled('FLOW_ENABLE_TRIAGE', 'Triage')
def triage_record(request, visit_id):
    """GET returns the record or ``null``; PUT replaces it completely."""
    if request.method == 'GET':
        return Response({'ok': True, 'data': queue_service.get_triage(visit_id)})
    vd = validated(TriageRecordSerializer, request.data)
    data = queue_service.put_triage(visit_id, dict(vd), actor=request.user)
    return Response({'ok': True, 'data': data})
