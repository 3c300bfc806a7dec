"""
Doctor endpoints.

Doctors are created under an OPD and stay there: the OPD is taken from
the URL on creation and is not editable afterwards.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.serializers.hospital import DoctorSerializer
from registry.services.formatting import format_doctor
from registry.services.reference_graph import ReferenceGraph

from ._common import get_or_404, storage


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def opd_doctors(request, opd_id):
    store = storage()
    ancestry = ReferenceGraph(store).derive_ancestors(opd_id, 'opd')
    if request.method == 'GET':
        return Response([format_doctor(d) for d in store.list('doctor', opd_id=ancestry.opd_id)])
    s = DoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    fields = dict(s.validated_data)
    fields['opd_id'] = ancestry.opd_id
    doctor = store.create('doctor', fields)
    return Response(format_doctor(doctor), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def list_doctors(request):
    filters = {}
    if request.query_params.get('opdId'):
        filters['opd_id'] = request.query_params['opdId']
    if request.query_params.get('hospitalId'):
        filters['opd__hospital_id'] = request.query_params['hospitalId']
    return Response([format_doctor(d) for d in storage().list('doctor', **filters)])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def doctor_detail(request, doctor_id):
    store = storage()
    doctor = get_or_404(store, 'doctor', doctor_id)
    if request.method == 'GET':
        return Response(format_doctor(doctor))
    if request.method == 'PUT':
        s = DoctorSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        doctor = store.update('doctor', doctor_id, dict(s.validated_data))
        return Response(format_doctor(doctor))
    with transaction.atomic():
        store.delete('doctor', doctor_id)
    return Response({'ok': True})
