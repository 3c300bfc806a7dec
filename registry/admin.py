"""
Django admin registrations for the registry models.

Lets staff inspect the hospital/OPD/doctor/patient chain and the
prescriptions under ``/admin/``.  Ancestor ids on patients and
prescriptions are read-only here; they are derived, not edited.
"""

from django.contrib import admin

from .models import AuditEvent, Doctor, Hospital, Opd, Patient, Prescription


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'hospital_type', 'contact_number', 'created_at')
    search_fields = ('id', 'name', 'license_number')


@admin.register(Opd)
class OpdAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'hospital', 'room_number', 'timings')
    list_filter = ('hospital',)
    search_fields = ('id', 'name', 'department_head')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'specialization', 'opd', 'experience_years')
    list_filter = ('opd__hospital', 'specialization')
    search_fields = ('id', 'name', 'email', 'doctor_license_id')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_code', 'full_name', 'gender', 'age', 'doctor', 'hospital', 'registration_date')
    list_filter = ('gender', 'visit_type', 'hospital')
    search_fields = ('patient_code', 'full_name', 'mobile_number')
    readonly_fields = ('patient_code', 'opd', 'hospital', 'registration_date')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('prescription_code', 'patient', 'doctor', 'visit_type', 'visit_date', 'status')
    list_filter = ('status', 'visit_type', 'hospital')
    search_fields = ('prescription_code', 'patient__full_name', 'patient__patient_code', 'chief_complaint')
    readonly_fields = ('prescription_code', 'opd', 'hospital', 'created_at', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id',)
