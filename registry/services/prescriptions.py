"""
Prescription assembly.

:class:`PrescriptionAssembler` is the single place where the three
parts of a visit record meet:

* the hospital/OPD ids, derived from the *treating* doctor (not from
  the patient's registration, since a follow-up may be seen by another
  department),
* the structured medications, lab orders and comma lists decoded from
  the form text,
* the flattened handwritten annotation exported from the drawing
  session.

Nothing is written until selection checks and ancestor derivation have
succeeded.
"""
from __future__ import annotations

import datetime
import logging
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from registry.drawing import EMPTY_PAYLOAD
from registry.exceptions import MissingParent, MissingSelection, NotFoundError
from registry.services import codec
from registry.services.reference_graph import ReferenceGraph

logger = logging.getLogger(__name__)

VISIT_TYPES = ('New Consultation', 'Follow-up', 'Emergency', 'Check-up')
STATUSES = ('Active', 'Completed', 'Cancelled')
VITAL_NUMBERS = ('temperature', 'pulse', 'respiratoryRate', 'oxygenSaturation', 'weight', 'height')


def _text(value: Any) -> str:
    return '' if value is None else str(value).strip()


def _datetime(value: Any) -> Optional[datetime.datetime]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime.combine(value, datetime.time())
    else:
        text = str(value).strip()
        parsed = parse_datetime(text)
        if parsed is None:
            day = parse_date(text)
            parsed = datetime.datetime.combine(day, datetime.time()) if day else None
        if parsed is None:
            return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _float(value: Any) -> Optional[float]:
    if value in (None, '') or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_vital_signs(raw: Any) -> dict:
    if not isinstance(raw, dict):
        return {}
    vitals: dict[str, Any] = {}
    for key in VITAL_NUMBERS:
        value = _float(raw.get(key))
        if value is not None:
            vitals[key] = value
    blood_pressure = _text(raw.get('bloodPressure'))
    if blood_pressure:
        vitals['bloodPressure'] = blood_pressure
    return vitals


def decode_medication_field(value: Any) -> list[dict]:
    if isinstance(value, (list, tuple)):
        records = [codec.MedicationRecord.from_dict(v) for v in value if isinstance(v, dict)]
    else:
        records = codec.decode_medications(value)
    return [r.to_dict() for r in records if r.medicine_name]


def decode_lab_test_field(value: Any) -> list[dict]:
    if isinstance(value, (list, tuple)):
        records = [codec.LabTestRecord.from_dict(v) for v in value if isinstance(v, dict)]
    else:
        records = codec.decode_lab_tests(value)
    return [r.to_dict() for r in records if r.test_name]


def _choice(choices, default):
    def parse(value):
        value = _text(value)
        return value if value in choices else default
    return parse


# form key -> (model field, parser)
FORM_FIELDS = {
    'visitDate': ('visit_date', _datetime),
    'visitType': ('visit_type', _choice(VISIT_TYPES, 'New Consultation')),
    'followUpDate': ('follow_up_date', _datetime),
    'chiefComplaint': ('chief_complaint', _text),
    'symptoms': ('symptoms', codec.decode_list),
    'diagnosis': ('diagnosis', codec.decode_list),
    'clinicalNotes': ('clinical_notes', _text),
    'medications': ('medications', decode_medication_field),
    'labTests': ('lab_tests', decode_lab_test_field),
    'prescriptionText': ('prescription_text', _text),
    'followUpInstructions': ('follow_up_instructions', _text),
    'vitalSigns': ('vital_signs', parse_vital_signs),
    'status': ('status', _choice(STATUSES, 'Active')),
}


def clinical_fields(raw_form: dict, *, partial: bool = False) -> dict:
    """Decode the editable part of a prescription form into model fields.

    With ``partial`` only keys present in the form are returned.
    """
    fields = {}
    for key, (name, parse) in FORM_FIELDS.items():
        if key not in raw_form:
            if partial:
                continue
            fields[name] = parse(None)
        else:
            fields[name] = parse(raw_form[key])
    if not partial and fields['visit_date'] is None:
        fields['visit_date'] = timezone.now()
    if partial and 'visit_date' in fields and fields['visit_date'] is None:
        del fields['visit_date']
    return fields


def prescription_code_for(entity) -> str:
    visit = entity.visit_date or timezone.now()
    return f"RX-{visit:%Y%m%d}-{str(entity.id)[-6:].upper()}"


class PrescriptionAssembler:
    def __init__(self, store, graph: Optional[ReferenceGraph] = None) -> None:
        self.store = store
        self.graph = graph or ReferenceGraph(store)

    def assemble(self, raw_form: dict, drawing_session, selected_doctor_id, selected_patient_id):
        if not selected_doctor_id or not selected_patient_id:
            raise MissingSelection('Please select both patient and doctor')

        ancestry = self.graph.derive_ancestors(selected_doctor_id, 'doctor')
        patient = self.store.get('patient', selected_patient_id)
        if patient is None:
            raise MissingParent('patient', selected_patient_id)

        fields = clinical_fields(raw_form or {})
        fields.update(ancestry.as_fields())
        fields['patient_id'] = patient.id
        fields['prescription_canvas'] = drawing_session.snapshot() if drawing_session is not None else EMPTY_PAYLOAD

        prescription = self.store.create('prescription', fields)
        if not getattr(prescription, 'prescription_code', ''):
            prescription = self.store.update(
                'prescription', prescription.id, {'prescription_code': prescription_code_for(prescription)}
            )
        logger.info('assembled prescription %s for patient %s (doctor %s, %d medications, %d lab tests)',
                    prescription.prescription_code, patient.id, ancestry.doctor_id,
                    len(fields['medications']), len(fields['lab_tests']))
        return prescription

    def revise(self, prescription_id, raw_form: dict, drawing_session=None):
        """Replace edited fields; id, code and reference chain stay as they are."""
        if self.store.get('prescription', prescription_id) is None:
            raise NotFoundError('prescription', prescription_id)
        fields = clinical_fields(raw_form or {}, partial=True)
        if drawing_session is not None:
            fields['prescription_canvas'] = drawing_session.snapshot()
        return self.store.update('prescription', prescription_id, fields)
