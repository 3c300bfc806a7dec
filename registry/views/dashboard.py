"""
Dashboard endpoint.

Counts of every entity kind plus the latest registrations and today's
visits, for the landing page of the administration UI.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.models import Doctor, Hospital, Opd, Patient, Prescription
from registry.services.formatting import format_patient

RECENT_PATIENTS = 5


@api_view(['GET'])
@permission_classes([AllowAny])
def dashboard(request):
    today = timezone.localdate()
    recent = Patient.objects.order_by('-registration_date')[:RECENT_PATIENTS]
    return Response({
        'hospitals': Hospital.objects.count(),
        'opds': Opd.objects.count(),
        'doctors': Doctor.objects.count(),
        'patients': Patient.objects.count(),
        'prescriptions': Prescription.objects.count(),
        'activePrescriptions': Prescription.objects.filter(status=Prescription.STATUS_ACTIVE).count(),
        'visitsToday': Prescription.objects.filter(visit_date__date=today).count(),
        'recentPatients': [format_patient(p) for p in recent],
    })
