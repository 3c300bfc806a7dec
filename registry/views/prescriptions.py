"""
Prescription endpoints.

A prescription is assembled from three inputs sent together: the
clinical form, the selected doctor/patient pair and the handwritten
annotation.  The annotation arrives either as the captured strokes,
which are replayed through an :class:`~registry.drawing.AnnotationEngine`,
or as an already flattened ``prescriptionCanvas`` payload.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.serializers.prescription import PrescriptionFormSerializer
from registry.services.canvas import build_session
from registry.services.formatting import format_prescription
from registry.services.prescriptions import PrescriptionAssembler
from registry.throttling import PrescriptionWriteThrottle

from ._common import get_or_404, storage

# Request keys that are not part of the clinical form itself
NON_FORM_KEYS = ('patientId', 'doctorId', 'strokes', 'prescriptionCanvas')


def _split(validated: dict):
    form = {k: v for k, v in validated.items() if k not in NON_FORM_KEYS}
    return form, validated.get('strokes'), validated.get('prescriptionCanvas')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([PrescriptionWriteThrottle])
def create_prescription(request):
    s = PrescriptionFormSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    form, strokes, canvas = _split(s.validated_data)
    session = build_session(strokes=strokes, canvas=canvas)
    with transaction.atomic():
        prescription = PrescriptionAssembler(storage()).assemble(
            form, session, s.validated_data.get('doctorId'), s.validated_data.get('patientId')
        )
    return Response(format_prescription(prescription), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def list_prescriptions(request):
    filters = {}
    for param, field in (('patientId', 'patient_id'), ('doctorId', 'doctor_id'), ('status', 'status')):
        if request.query_params.get(param):
            filters[field] = request.query_params[param]
    items = storage().list('prescription', **filters)
    return Response([format_prescription(rx, include_canvas=False) for rx in items])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
@throttle_classes([PrescriptionWriteThrottle])
def prescription_detail(request, prescription_id):
    store = storage()
    prescription = get_or_404(store, 'prescription', prescription_id)
    if request.method == 'GET':
        return Response(format_prescription(prescription))
    if request.method == 'PUT':
        s = PrescriptionFormSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        form, strokes, canvas = _split(s.validated_data)
        if strokes is not None and canvas is None:
            # New strokes are drawn over what was saved before
            canvas = prescription.prescription_canvas
        session = build_session(strokes=strokes, canvas=canvas)
        with transaction.atomic():
            prescription = PrescriptionAssembler(store).revise(prescription_id, form, session)
        return Response(format_prescription(prescription))
    with transaction.atomic():
        store.delete('prescription', prescription_id)
    return Response({'ok': True})
