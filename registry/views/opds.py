"""OPD endpoints.  An OPD always belongs to the hospital in its URL."""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.serializers.hospital import OpdSerializer
from registry.services.formatting import format_opd
from registry.services.reference_graph import ReferenceGraph

from ._common import storage


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def hospital_opds(request, hospital_id):
    store = storage()
    ancestry = ReferenceGraph(store).derive_ancestors(hospital_id, 'hospital')
    if request.method == 'GET':
        return Response([format_opd(o) for o in store.list('opd', hospital_id=ancestry.hospital_id)])
    s = OpdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    fields = dict(s.validated_data)
    fields['hospital_id'] = ancestry.hospital_id
    opd = store.create('opd', fields)
    return Response(format_opd(opd), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def list_opds(request):
    filters = {}
    hospital_id = request.query_params.get('hospitalId')
    if hospital_id:
        filters['hospital_id'] = hospital_id
    return Response([format_opd(o) for o in storage().list('opd', **filters)])
