"""
Patient endpoints.

Registration takes the treating doctor from the form and copies that
doctor's OPD and hospital onto the patient; a client never chooses
them.  The human-readable ``PAT0001`` code is generated on the server.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.serializers.patient import PatientSerializer
from registry.services.formatting import format_patient
from registry.services.patients import register_patient, update_patient
from registry.throttling import PatientWriteThrottle

from ._common import get_or_404, storage

RECENT_DEFAULT = 10
RECENT_MAX = 100


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([PatientWriteThrottle])
def patient_register(request):
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with transaction.atomic():
        patient = register_patient(storage(), dict(s.validated_data))
    return Response(format_patient(patient), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def list_patients(request):
    filters = {}
    for param, field in (('doctorId', 'doctor_id'), ('opdId', 'opd_id'), ('hospitalId', 'hospital_id')):
        if request.query_params.get(param):
            filters[field] = request.query_params[param]
    return Response([format_patient(p) for p in storage().list('patient', **filters)])


@api_view(['GET'])
@permission_classes([AllowAny])
def recent_patients(request):
    try:
        limit = int(request.query_params.get('limit', RECENT_DEFAULT))
    except (TypeError, ValueError):
        limit = RECENT_DEFAULT
    limit = max(1, min(limit, RECENT_MAX))
    return Response([format_patient(p) for p in storage().list('patient', limit=limit)])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
@throttle_classes([PatientWriteThrottle])
def patient_detail(request, patient_id):
    store = storage()
    patient = get_or_404(store, 'patient', patient_id)
    if request.method == 'GET':
        return Response(format_patient(patient))
    if request.method == 'PUT':
        s = PatientSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        with transaction.atomic():
            patient = update_patient(store, patient_id, dict(s.validated_data))
        return Response(format_patient(patient))
    # Prescriptions of the patient go with it
    with transaction.atomic():
        store.delete('patient', patient_id)
    return Response({'ok': True})
