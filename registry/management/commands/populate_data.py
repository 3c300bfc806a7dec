"""
Management command to populate the database with demo data.

Everything is created through the registry services, so the demo
patient and prescription get their ancestor ids and codes exactly the
way API clients would.
"""
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from registry.drawing import Point, Stroke
from registry.models import OPD_DEPARTMENTS
from registry.services.canvas import new_engine
from registry.services.patients import register_patient
from registry.services.prescriptions import PrescriptionAssembler
from registry.services.storage import default_storage


class Command(BaseCommand):
    help = 'Populate database with demo data'

    def handle(self, *args, **options):
        self.stdout.write('Creating demo data...')
        store = default_storage()
        with transaction.atomic():
            hospital = self.create_hospital(store)
            opd = self.create_opd(store, hospital)
            doctor = self.create_doctor(store, opd)
            patient = self.create_patient(store, doctor)
            prescription = self.create_prescription(store, doctor, patient)
        self.stdout.write(f'  hospital {hospital.name} ({hospital.id})')
        self.stdout.write(f'  patient {patient.patient_code}, prescription {prescription.prescription_code}')
        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def create_hospital(self, store):
        return store.create('hospital', {
            'name': 'City General Hospital',
            'address': '12 Station Road, Pune, Maharashtra - 411001',
            'contact_number': '020-5550100',
            'email': 'info@citygeneral.example',
            'license_number': 'MH-HOSP-0042',
            'hospital_type': 'Multi-specialty',
            'opd_departments': list(OPD_DEPARTMENTS),
        })

    def create_opd(self, store, hospital):
        return store.create('opd', {
            'hospital_id': hospital.id,
            'name': 'General',
            'room_number': '101',
            'timings': '09:00-13:00',
            'operation_days': ['Mon', 'Tue', 'Wed', 'Thu', 'Fri'],
            'department_head': 'Dr. Mehta',
        })

    def create_doctor(self, store, opd):
        return store.create('doctor', {
            'opd_id': opd.id,
            'name': 'Asha Rao',
            'email': 'asha.rao@citygeneral.example',
            'mobile_number': '9800000001',
            'specialization': 'General Medicine',
            'available_time_slots': ['09:00-11:00', '11:30-13:00'],
            'qualification': 'MBBS, MD',
            'experience_years': 12,
            'doctor_license_id': 'MCI-77812',
        })

    def create_patient(self, store, doctor):
        return register_patient(store, {
            'doctor_id': doctor.id,
            'full_name': 'Ravi Kumar',
            'gender': 'Male',
            'age': 42,
            'blood_group': 'B+',
            'mobile_number': '9811122233',
            'city': 'Pune',
            'state': 'Maharashtra',
            'allergies': ['Penicillin'],
            'existing_conditions': ['Hypertension'],
            'symptoms': 'Fever and sore throat for three days',
        })

    def create_prescription(self, store, doctor, patient):
        # A short underline, as if the doctor had signed off the note
        engine = new_engine()
        engine.replay([Stroke(points=(Point(80, 520), Point(240, 524), Point(400, 518)),
                              color=engine.color, width=engine.stroke_width)])
        form = {
            'visitDate': timezone.now(),
            'visitType': 'New Consultation',
            'followUpDate': timezone.now() + timedelta(days=7),
            'chiefComplaint': 'Fever',
            'symptoms': 'fever, sore throat',
            'diagnosis': 'Acute pharyngitis',
            'medications': 'Paracetamol|500mg|TDS|5 days|After food|15;Azithromycin|500mg|OD|3 days||3',
            'labTests': 'CBC||Routine',
            'vitalSigns': {'temperature': '101.2', 'bloodPressure': '130/85', 'pulse': '92'},
        }
        return PrescriptionAssembler(store).assemble(form, engine, doctor.id, patient.id)
