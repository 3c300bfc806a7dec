"""
Integration tests for the clinic API.

These exercise the registry end to end through Django REST Framework's
APIClient: the hospital/OPD/doctor chain, patient registration with
derived ancestors, prescription assembly including the handwritten
annotation, and the error envelope.

To run the tests:

```
pytest -q registry/tests
```
"""
from io import StringIO
from unittest import mock

from django.core.management import call_command
from rest_framework import status
from rest_framework.test import APITestCase
from PIL import Image

from ..models import AuditEvent, Doctor, Hospital, Patient, Prescription
from ..throttling import PatientWriteThrottle

STROKE = {
    'points': [{'x': 10, 'y': 10}, {'x': 120, 'y': 40, 'pressure': 0.7}, {'x': 200, 'y': 90}],
    'color': '#1A237E',
    'width': 3,
}


class ClinicAPITests(APITestCase):
    def setUp(self) -> None:
        """Create one hospital with an OPD and a doctor through the API."""
        r = self.client.post('/api/hospitals/register', {
            'name': 'City General',
            'addressLine1': '12 Station Road',
            'city': 'Pune',
            'state': 'Maharashtra',
            'pinCode': '411001',
            'opdDepartments': 'General, ENT',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.hospital = r.data

        r = self.client.post(f"/api/hospitals/{self.hospital['id']}/opds",
                             {'name': 'General', 'roomNumber': '101', 'operationDays': ['Mon', 'Tue']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.opd = r.data

        r = self.client.post(f"/api/opds/{self.opd['id']}/doctors",
                             {'name': 'Asha Rao', 'specialization': 'Medicine', 'experienceYears': 12}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.doctor = r.data

    def register_patient(self, **extra):
        payload = {
            'doctorId': self.doctor['id'],
            'fullName': 'Ravi Kumar',
            'gender': 'Male',
            'age': 42,
            'mobileNumber': '98111 22233',
            'allergies': 'Penicillin, Dust',
        }
        payload.update(extra)
        return self.client.post('/api/patients/register', payload, format='json')

    def second_doctor(self):
        h = self.client.post('/api/hospitals/register', {'name': 'South Clinic'}, format='json').data
        o = self.client.post(f"/api/hospitals/{h['id']}/opds", {'name': 'ENT'}, format='json').data
        d = self.client.post(f"/api/opds/{o['id']}/doctors", {'name': 'Iyer'}, format='json').data
        return h, o, d

    # ------------------------------------------------------------------
    # Hospitals, OPDs, doctors
    # ------------------------------------------------------------------
    def test_hospital_registration_builds_address(self):
        self.assertEqual(self.hospital['address'], '12 Station Road, Pune, Maharashtra - 411001')
        self.assertEqual(self.hospital['opdDepartments'], ['General', 'ENT'])
        self.assertEqual(self.opd['hospitalId'], self.hospital['id'])
        self.assertEqual(self.doctor['opdId'], self.opd['id'])

    def test_listings_follow_the_hierarchy(self):
        r = self.client.get(f"/api/hospitals/{self.hospital['id']}/opds")
        self.assertEqual([o['id'] for o in r.data], [self.opd['id']])
        r = self.client.get(f"/api/opds/{self.opd['id']}/doctors")
        self.assertEqual([d['name'] for d in r.data], ['Asha Rao'])
        self.assertEqual(len(self.client.get('/api/hospitals').data), 1)
        self.assertEqual(len(self.client.get('/api/doctors').data), 1)

    def test_opd_under_missing_hospital(self):
        r = self.client.post('/api/hospitals/nope/opds', {'name': 'ENT'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(r.data['ok'])
        self.assertEqual(r.data['error']['code'], 'missing_parent')

    def test_update_hospital_and_doctor(self):
        r = self.client.put(f"/api/hospitals/{self.hospital['id']}", {'contactNumber': '020-555'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['contactNumber'], '020-555')
        self.assertEqual(r.data['name'], 'City General')
        r = self.client.put(f"/api/doctors/{self.doctor['id']}", {'availableTimeSlots': '09:00-11:00'}, format='json')
        self.assertEqual(r.data['availableTimeSlots'], ['09:00-11:00'])
        self.assertEqual(r.data['opdId'], self.opd['id'])

    def test_markup_is_stripped_from_free_text(self):
        r = self.client.post('/api/hospitals/register', {'name': '<b>Sunrise</b><script>x</script>'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('<', r.data['name'])
        self.assertTrue(r.data['name'].startswith('Sunrise'))

    def test_unknown_entity_is_not_found(self):
        r = self.client.get('/api/hospitals/does-not-exist')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['error']['code'], 'not_found')

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------
    def test_patient_registration_derives_ancestors(self):
        other_hospital, _, _ = self.second_doctor()
        r = self.register_patient(hospitalId=other_hospital['id'], patientCode='PAT0999')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['patientCode'], 'PAT0001')
        self.assertEqual(r.data['hospitalId'], self.hospital['id'])
        self.assertEqual(r.data['opdId'], self.opd['id'])
        self.assertEqual(r.data['allergies'], ['Penicillin', 'Dust'])
        self.assertEqual(self.register_patient(fullName='Second').data['patientCode'], 'PAT0002')

    def test_patient_registration_with_unknown_doctor(self):
        r = self.register_patient(doctorId='ghost')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['error']['code'], 'missing_parent')
        self.assertEqual(Patient.objects.count(), 0)

    def test_patient_registration_validates_input(self):
        r = self.register_patient(gender='Unknown', mobileNumber='call me')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'api_error')

    def test_patient_reassignment_rederives_chain(self):
        patient = self.register_patient().data
        h2, o2, d2 = self.second_doctor()
        r = self.client.put(f"/api/patients/{patient['id']}", {'doctorId': d2['id']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual((r.data['opdId'], r.data['hospitalId']), (o2['id'], h2['id']))
        self.assertEqual(r.data['patientCode'], patient['patientCode'])

    def test_recent_and_filtered_patients(self):
        for name in ('A', 'B', 'C'):
            self.register_patient(fullName=name)
        r = self.client.get('/api/patients/recent?limit=2')
        self.assertEqual(len(r.data), 2)
        r = self.client.get(f"/api/patients?doctorId={self.doctor['id']}")
        self.assertEqual(len(r.data), 3)
        r = self.client.get('/api/patients?doctorId=someone-else')
        self.assertEqual(r.data, [])

    def test_referenced_doctor_cannot_be_deleted(self):
        self.register_patient()
        r = self.client.delete(f"/api/doctors/{self.doctor['id']}")
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data['error']['code'], 'protected')
        self.assertTrue(Doctor.objects.filter(pk=self.doctor['id']).exists())

    def test_deleting_unreferenced_hospital_cascades(self):
        r = self.client.delete(f"/api/hospitals/{self.hospital['id']}")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(Hospital.objects.exists())
        self.assertFalse(Doctor.objects.exists())

    # ------------------------------------------------------------------
    # Prescriptions
    # ------------------------------------------------------------------
    def test_prescription_requires_selection(self):
        patient = self.register_patient().data
        r = self.client.post('/api/prescriptions/create', {'patientId': patient['id'], 'doctorId': ''}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'missing_selection')
        self.assertEqual(Prescription.objects.count(), 0)

    def test_prescription_for_missing_patient(self):
        r = self.client.post('/api/prescriptions/create',
                             {'patientId': 'ghost', 'doctorId': self.doctor['id']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['error']['code'], 'missing_parent')

    def test_prescription_with_strokes(self):
        patient = self.register_patient().data
        r = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'],
            'doctorId': self.doctor['id'],
            'visitDate': '2024-06-01T09:15:00+05:30',
            'symptoms': 'fever, cough',
            'medications': 'Paracetamol|500mg|TDS|5 days|After food|15',
            'labTests': 'CBC||Urgent, LFT',
            'vitalSigns': {'temperature': '101', 'bloodPressure': '130/85'},
            'strokes': [STROKE],
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data['prescriptionCode'].startswith('RX-20240601-'))
        self.assertEqual(r.data['hospitalId'], self.hospital['id'])
        self.assertEqual(r.data['medications'][0]['quantity'], 15)
        self.assertEqual([t['urgency'] for t in r.data['labTests']], ['Urgent', 'Routine'])
        self.assertEqual(r.data['vitalSigns'], {'temperature': 101.0, 'bloodPressure': '130/85'})
        self.assertTrue(r.data['prescriptionCanvas'].startswith('data:image/png;base64,'))
        self.assertTrue(r.data['hasCanvas'])

        listing = self.client.get(f"/api/prescriptions?patientId={patient['id']}").data
        self.assertEqual(len(listing), 1)
        self.assertNotIn('prescriptionCanvas', listing[0])

    def test_prescription_canvas_round_trip(self):
        patient = self.register_patient().data
        first = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'], 'doctorId': self.doctor['id'], 'strokes': [STROKE],
        }, format='json').data
        again = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'], 'doctorId': self.doctor['id'],
            'prescriptionCanvas': first['prescriptionCanvas'],
        }, format='json')
        self.assertEqual(again.status_code, status.HTTP_201_CREATED)
        self.assertTrue(again.data['hasCanvas'])

    def test_prescription_without_drawing_has_empty_canvas(self):
        patient = self.register_patient().data
        r = self.client.post('/api/prescriptions/create',
                             {'patientId': patient['id'], 'doctorId': self.doctor['id']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['prescriptionCanvas'], '')
        self.assertEqual(r.data['visitType'], 'New Consultation')

    def test_structured_medication_without_name_is_rejected(self):
        patient = self.register_patient().data
        r = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'], 'doctorId': self.doctor['id'],
            'medications': [{'medicineName': '', 'dosage': '5ml'}],
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_canvas_payload_is_rejected(self):
        patient = self.register_patient().data
        r = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'], 'doctorId': self.doctor['id'],
            'prescriptionCanvas': 'data:image/png;base64,AAAA',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_prescription_ancestors_follow_treating_doctor(self):
        patient = self.register_patient().data
        h2, o2, d2 = self.second_doctor()
        r = self.client.post('/api/prescriptions/create',
                             {'patientId': patient['id'], 'doctorId': d2['id']}, format='json')
        self.assertEqual((r.data['opdId'], r.data['hospitalId']), (o2['id'], h2['id']))

    def test_revise_prescription(self):
        patient = self.register_patient().data
        rx = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'], 'doctorId': self.doctor['id'], 'diagnosis': 'URTI',
        }, format='json').data
        r = self.client.put(f"/api/prescriptions/{rx['id']}",
                            {'status': 'Completed', 'strokes': [STROKE]}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['status'], 'Completed')
        self.assertEqual(r.data['diagnosis'], ['URTI'])
        self.assertEqual(r.data['prescriptionCode'], rx['prescriptionCode'])
        self.assertTrue(r.data['hasCanvas'])

        r = self.client.delete(f"/api/prescriptions/{rx['id']}")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(f"/api/prescriptions/{rx['id']}").status_code, status.HTTP_404_NOT_FOUND)

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------
    def test_dashboard_counts(self):
        patient = self.register_patient().data
        self.client.post('/api/prescriptions/create',
                         {'patientId': patient['id'], 'doctorId': self.doctor['id']}, format='json')
        r = self.client.get('/api/dashboard')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual((r.data['hospitals'], r.data['doctors'], r.data['patients']), (1, 1, 1))
        self.assertEqual(r.data['prescriptions'], 1)
        self.assertEqual(r.data['activePrescriptions'], 1)
        self.assertEqual(r.data['recentPatients'][0]['id'], patient['id'])

    def test_writes_are_audited(self):
        self.register_patient()
        actions = set(AuditEvent.objects.values_list('action', flat=True))
        self.assertTrue({'hospital_create', 'opd_create', 'doctor_create', 'patient_create'} <= actions)

    def test_healthz(self):
        r = self.client.get('/healthz')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.json()['ok'])

    def test_populate_data_command(self):
        out = StringIO()
        call_command('populate_data', stdout=out)
        self.assertIn('Demo data created', out.getvalue())
        rx = Prescription.objects.get(chief_complaint='Fever')
        self.assertEqual(len(rx.medications), 2)
        self.assertTrue(rx.prescription_canvas.startswith('data:image/png;base64,'))
        self.assertEqual(rx.hospital_id, rx.doctor.opd.hospital_id)

    def test_patient_codes_past_four_digits(self):
        first = self.register_patient().data
        Patient.objects.filter(pk=first['id']).update(patient_code='PAT9999')
        r = self.register_patient(fullName='Next')
        self.assertEqual(r.data['patientCode'], 'PAT10000')
        r = self.register_patient(fullName='After')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['patientCode'], 'PAT10001')

    def test_oversized_canvas_payload_is_rejected(self):
        patient = self.register_patient().data
        canvas = self.client.post('/api/prescriptions/create', {
            'patientId': patient['id'], 'doctorId': self.doctor['id'], 'strokes': [STROKE],
        }, format='json').data['prescriptionCanvas']
        with mock.patch.object(Image, 'MAX_IMAGE_PIXELS', 1000):
            r = self.client.post('/api/prescriptions/create', {
                'patientId': patient['id'], 'doctorId': self.doctor['id'], 'prescriptionCanvas': canvas,
            }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_write_throttle_ignores_reads(self):
        patient = self.register_patient().data
        url = f"/api/patients/{patient['id']}"
        with mock.patch.object(PatientWriteThrottle, 'rate', '2/min', create=True):
            for _ in range(5):
                self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
            self.assertEqual(self.client.put(url, {'city': 'Pune'}, format='json').status_code,
                             status.HTTP_200_OK)
            r = self.client.put(url, {'city': 'Mumbai'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
