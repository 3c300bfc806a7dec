"""
Hospital endpoints.

Hospitals are the roots of the registry; they can be created, edited
and removed freely.  Removing one cascades to its OPDs and doctors but
is refused (409) while patients or prescriptions still point at it.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.serializers.hospital import HospitalSerializer
from registry.services.formatting import format_hospital

from ._common import get_or_404, storage


@api_view(['POST'])
@permission_classes([AllowAny])
def register_hospital(request):
    s = HospitalSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    hospital = storage().create('hospital', dict(s.validated_data))
    return Response(format_hospital(hospital), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def list_hospitals(request):
    return Response([format_hospital(h) for h in storage().list('hospital')])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def hospital_detail(request, hospital_id):
    store = storage()
    hospital = get_or_404(store, 'hospital', hospital_id)
    if request.method == 'GET':
        return Response(format_hospital(hospital))
    if request.method == 'PUT':
        s = HospitalSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        hospital = store.update('hospital', hospital_id, dict(s.validated_data))
        return Response(format_hospital(hospital))
    with transaction.atomic():
        store.delete('hospital', hospital_id)
    return Response({'ok': True})
