from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from flow.features import require_enabled
from flow.permissions import IsStationStaff
from flow.serializers import validated
from flow.serializers.visits import AvailableDoctorsQuerySerializer
from flow.services import queue_service


@api_view(['GET'])
@permission_classes([IsStationStaff])
@require_enabled('FLOW_ENABLE_QUEUE', 'Queue')
def available_doctors(request):
    """Doctors a visit can be routed to when advancing into the doctor stage.
    Query params:
      - q: optional search (first name, last name or username contains)
    """
    vd = validated(AvailableDoctorsQuerySerializer, request.query_params)
    return Response({'ok': True, 'data': queue_service.list_available_doctors(vd.get('q'))})
