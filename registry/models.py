"""
Database models for the clinic backend.

The registry is a strict hierarchy::

    Hospital <- Opd <- Doctor <- Patient <- Prescription

Patients and prescriptions carry copies of their ancestor ids
(``opd``/``hospital``) so that they can be filtered without joins.
Those copies are never taken from the client; they are derived from
the treating doctor by :mod:`registry.services.reference_graph`.

Primary keys are opaque hex strings.  Patients and prescriptions also
get a short human-readable code (``PAT0001``, ``RX-20240101-1A2B3C``).
"""
from __future__ import annotations

import uuid
from django.db import models


def new_id() -> str:
    return uuid.uuid4().hex


OPD_DEPARTMENTS = ['General', 'ENT', 'Cardio', 'Gyno']


class Hospital(models.Model):
    id = models.CharField(max_length=32, primary_key=True, default=new_id, editable=False)
    name = models.CharField(max_length=255)
    address = models.TextField(blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    license_number = models.CharField(max_length=64, blank=True, db_index=True)
    hospital_type = models.CharField(max_length=64, blank=True)
    opd_departments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Opd(models.Model):
    """An outpatient department of a hospital."""
    id = models.CharField(max_length=32, primary_key=True, default=new_id, editable=False)
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='opds')
    name = models.CharField(max_length=255)
    room_number = models.CharField(max_length=32, blank=True)
    timings = models.CharField(max_length=128, blank=True)
    operation_days = models.JSONField(default=list, blank=True)
    department_head = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} @ {self.hospital_id}"


class Doctor(models.Model):
    id = models.CharField(max_length=32, primary_key=True, default=new_id, editable=False)
    opd = models.ForeignKey(Opd, on_delete=models.CASCADE, related_name='doctors')
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    mobile_number = models.CharField(max_length=32, blank=True)
    specialization = models.CharField(max_length=255, blank=True)
    available_time_slots = models.JSONField(default=list, blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    experience_years = models.PositiveIntegerField(default=0)
    doctor_license_id = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Dr. {self.name}"


class Patient(models.Model):
    GENDER_CHOICES = [('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')]
    VISIT_CHOICES = [('New', 'New'), ('Follow-up', 'Follow-up')]

    id = models.CharField(max_length=32, primary_key=True, default=new_id, editable=False)
    patient_code = models.CharField(max_length=16, unique=True)

    full_name = models.CharField(max_length=255)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    dob = models.DateField(null=True, blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    blood_group = models.CharField(max_length=8, blank=True)

    mobile_number = models.CharField(max_length=32)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=128, blank=True)
    state = models.CharField(max_length=128, blank=True)
    pin_code = models.CharField(max_length=16, blank=True)

    weight = models.FloatField(null=True, blank=True)
    height = models.FloatField(null=True, blank=True)
    existing_conditions = models.JSONField(default=list, blank=True)
    allergies = models.JSONField(default=list, blank=True)
    medications = models.JSONField(default=list, blank=True)
    past_diseases = models.JSONField(default=list, blank=True)
    family_history = models.TextField(blank=True)

    visit_type = models.CharField(max_length=16, choices=VISIT_CHOICES, default='New')
    appointment_date = models.DateTimeField(null=True, blank=True)
    symptoms = models.TextField(blank=True)

    emergency_contact_name = models.CharField(max_length=255, blank=True)
    emergency_contact_number = models.CharField(max_length=32, blank=True)
    relation_with_patient = models.CharField(max_length=64, blank=True)

    # Registration-time snapshot of the reference chain
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='patients')
    opd = models.ForeignKey(Opd, on_delete=models.PROTECT, related_name='patients')
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='patients')

    registration_date = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self) -> str:
        return f"{self.patient_code} {self.full_name}"


class Prescription(models.Model):
    VISIT_CHOICES = [
        ('New Consultation', 'New Consultation'),
        ('Follow-up', 'Follow-up'),
        ('Emergency', 'Emergency'),
        ('Check-up', 'Check-up'),
    ]
    STATUS_ACTIVE = 'Active'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    id = models.CharField(max_length=32, primary_key=True, default=new_id, editable=False)
    prescription_code = models.CharField(max_length=32, blank=True, db_index=True)

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='prescriptions')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='prescriptions')
    opd = models.ForeignKey(Opd, on_delete=models.PROTECT, related_name='prescriptions')
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='prescriptions')

    visit_date = models.DateTimeField()
    visit_type = models.CharField(max_length=32, choices=VISIT_CHOICES, default='New Consultation')
    follow_up_date = models.DateTimeField(null=True, blank=True)
    chief_complaint = models.TextField(blank=True)
    symptoms = models.JSONField(default=list, blank=True)
    diagnosis = models.JSONField(default=list, blank=True)
    clinical_notes = models.TextField(blank=True)
    medications = models.JSONField(default=list, blank=True)
    lab_tests = models.JSONField(default=list, blank=True)
    prescription_text = models.TextField(blank=True)
    follow_up_instructions = models.TextField(blank=True)
    vital_signs = models.JSONField(default=dict, blank=True)
    # PNG data URL of the handwritten annotation; '' when nothing was drawn
    prescription_canvas = models.TextField(blank=True, default='')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'visit_date']),
            models.Index(fields=['doctor', 'visit_date']),
        ]

    def __str__(self) -> str:
        return f"{self.prescription_code or self.id} ({self.patient_id})"


class AuditEvent(models.Model):
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}/{self.object_id}"
