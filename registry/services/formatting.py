"""
Response shapes for registry entities.

The front-end works in camelCase and addresses every entity by an
``id`` key; ancestor references are exposed as ``hospitalId``,
``opdId`` and ``doctorId``.
"""
from __future__ import annotations


def _iso(value):
    return value.isoformat() if value else None


def format_hospital(h) -> dict:
    return {
        'id': h.id,
        'name': h.name,
        'address': h.address,
        'contactNumber': h.contact_number,
        'email': h.email,
        'licenseNumber': h.license_number,
        'hospitalType': h.hospital_type,
        'opdDepartments': list(h.opd_departments or []),
        'createdAt': _iso(h.created_at),
    }


def format_opd(o) -> dict:
    return {
        'id': o.id,
        'hospitalId': o.hospital_id,
        'name': o.name,
        'roomNumber': o.room_number,
        'timings': o.timings,
        'operationDays': list(o.operation_days or []),
        'departmentHead': o.department_head,
        'createdAt': _iso(o.created_at),
    }


def format_doctor(d) -> dict:
    return {
        'id': d.id,
        'opdId': d.opd_id,
        'name': d.name,
        'email': d.email,
        'mobileNumber': d.mobile_number,
        'specialization': d.specialization,
        'availableTimeSlots': list(d.available_time_slots or []),
        'qualification': d.qualification,
        'experienceYears': d.experience_years,
        'doctorLicenseId': d.doctor_license_id,
        'createdAt': _iso(d.created_at),
    }


def format_patient(p) -> dict:
    return {
        'id': p.id,
        'patientCode': p.patient_code,
        'fullName': p.full_name,
        'gender': p.gender,
        'dob': _iso(p.dob),
        'age': p.age,
        'bloodGroup': p.blood_group,
        'mobileNumber': p.mobile_number,
        'email': p.email,
        'address': p.address,
        'city': p.city,
        'state': p.state,
        'pinCode': p.pin_code,
        'weight': p.weight,
        'height': p.height,
        'existingConditions': list(p.existing_conditions or []),
        'allergies': list(p.allergies or []),
        'medications': list(p.medications or []),
        'pastDiseases': list(p.past_diseases or []),
        'familyHistory': p.family_history,
        'visitType': p.visit_type,
        'appointmentDate': _iso(p.appointment_date),
        'symptoms': p.symptoms,
        'emergencyContactName': p.emergency_contact_name,
        'emergencyContactNumber': p.emergency_contact_number,
        'relationWithPatient': p.relation_with_patient,
        'doctorId': p.doctor_id,
        'opdId': p.opd_id,
        'hospitalId': p.hospital_id,
        'registrationDate': _iso(p.registration_date),
    }


def format_prescription(rx, *, include_canvas: bool = True) -> dict:
    data = {
        'id': rx.id,
        'prescriptionCode': rx.prescription_code,
        'patientId': rx.patient_id,
        'doctorId': rx.doctor_id,
        'opdId': rx.opd_id,
        'hospitalId': rx.hospital_id,
        'visitDate': _iso(rx.visit_date),
        'visitType': rx.visit_type,
        'followUpDate': _iso(rx.follow_up_date),
        'chiefComplaint': rx.chief_complaint,
        'symptoms': list(rx.symptoms or []),
        'diagnosis': list(rx.diagnosis or []),
        'clinicalNotes': rx.clinical_notes,
        'medications': list(rx.medications or []),
        'labTests': list(rx.lab_tests or []),
        'prescriptionText': rx.prescription_text,
        'followUpInstructions': rx.follow_up_instructions,
        'vitalSigns': dict(rx.vital_signs or {}),
        'status': rx.status,
        'hasCanvas': bool(rx.prescription_canvas),
        'createdAt': _iso(rx.created_at),
        'updatedAt': _iso(rx.updated_at),
    }
    # Listings leave the image out; it can be large
    if include_canvas:
        data['prescriptionCanvas'] = rx.prescription_canvas
    return data
