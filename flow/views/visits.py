"""
Visit endpoints used by the reception, triage and doctor terminals.

Creating a visit issues the reception token; advancing a visit queues it
at the next station.  The terminal that advanced a visit is expected to
serve its own entry afterwards (see :mod:`flow.views.queue`).
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from flow.features import require_enabled
from flow.permissions import IsReceptionRole, IsStationStaff
from flow.serializers import validated
from flow.serializers.visits import AdvanceVisitSerializer, CreateVisitSerializer
from flow.services import queue_service


@api_view(['POST'])
@permission_classes([IsReceptionRole])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def create_visit(request):
    """Body: ``patientId``, optional ``priority``.  Returns the visit and its token."""
    vd = validated(CreateVisitSerializer, request.data)
    data = queue_service.create_visit(vd['patientId'], vd['priority'], actor=request.user)
    return Response({'ok': True, 'data': data}, status=201)


@api_view(['GET'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def visit_detail(request, visit_id):
    return Response({'ok': True, 'data': queue_service.get_visit(visit_id)})


@api_view(['POST'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def advance_visit(request, visit_id):
    """Body: ``toStage``, optional ``doctorId`` and ``fromStage``.

    Two advances racing on the same visit: one gets the new entry, the
    other a 409 ``invalid_transition``.
    """
    vd = validated(AdvanceVisitSerializer, request.data)
    entry = queue_service.advance_visit(
        visit_id,
        vd['toStage'],
        doctor_id=vd.get('doctorId'),
        from_stage=vd.get('fromStage'),
        actor=request.user,
    )
    return Response({'ok': True, 'data': entry})
