"""
Text codec for structured clinical records.

The prescription form carries lists of medications and lab orders in
single plain-text fields using a two-level delimiter grammar:

* medications: records separated by ``;``, fields by ``|`` in the order
  ``medicineName|dosage|frequency|duration|instructions|quantity``
* lab tests: records separated by ``,``, fields by ``|`` in the order
  ``testName|instructions|urgency``
* simple lists (symptoms, diagnosis, allergies, ...): comma separated

Decoding is lenient and never raises: a bad urgency becomes
``Routine``, a non-numeric quantity becomes ``None`` and a record
without a name is dropped.  Encoding is the inverse for trimmed
records.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

MEDICATION_SEPARATOR = ';'
LAB_TEST_SEPARATOR = ','
LIST_SEPARATOR = ','
FIELD_SEPARATOR = '|'

URGENCY_ROUTINE = 'Routine'
URGENCY_URGENT = 'Urgent'
URGENCY_STAT = 'STAT'
URGENCY_CHOICES = (URGENCY_ROUTINE, URGENCY_URGENT, URGENCY_STAT)
_URGENCY_LOOKUP = {u.lower(): u for u in URGENCY_CHOICES}


@dataclass(frozen=True)
class MedicationRecord:
    medicine_name: str
    dosage: str = ''
    frequency: str = ''
    duration: str = ''
    instructions: str = ''
    quantity: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            'medicineName': self.medicine_name,
            'dosage': self.dosage,
            'frequency': self.frequency,
            'duration': self.duration,
            'instructions': self.instructions,
        }
        if self.quantity is not None:
            data['quantity'] = self.quantity
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'MedicationRecord':
        return cls(
            medicine_name=_text(data.get('medicineName')),
            dosage=_text(data.get('dosage')),
            frequency=_text(data.get('frequency')),
            duration=_text(data.get('duration')),
            instructions=_text(data.get('instructions')),
            quantity=parse_quantity(data.get('quantity')),
        )


@dataclass(frozen=True)
class LabTestRecord:
    test_name: str
    instructions: str = ''
    urgency: str = URGENCY_ROUTINE

    def to_dict(self) -> dict:
        return {'testName': self.test_name, 'instructions': self.instructions, 'urgency': self.urgency}

    @classmethod
    def from_dict(cls, data: dict) -> 'LabTestRecord':
        return cls(
            test_name=_text(data.get('testName')),
            instructions=_text(data.get('instructions')),
            urgency=parse_urgency(data.get('urgency')),
        )


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def parse_quantity(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_urgency(value: Any) -> str:
    return _URGENCY_LOOKUP.get(_text(value).lower(), URGENCY_ROUTINE)


def _fields(record: str, count: int) -> list[str]:
    parts = [p.strip() for p in record.split(FIELD_SEPARATOR)]
    return parts + [''] * (count - len(parts))


# ---------------------------------------------------------------------------
# Medications
# ---------------------------------------------------------------------------

def decode_medications(text: Any) -> list[MedicationRecord]:
    if not isinstance(text, str) or not text.strip():
        return []
    records: list[MedicationRecord] = []
    for chunk in text.split(MEDICATION_SEPARATOR):
        name, dosage, frequency, duration, instructions, quantity = _fields(chunk, 6)[:6]
        if not name:
            continue
        records.append(MedicationRecord(
            medicine_name=name,
            dosage=dosage,
            frequency=frequency,
            duration=duration,
            instructions=instructions,
            quantity=parse_quantity(quantity) if quantity else None,
        ))
    return records


def encode_medications(records: Iterable[MedicationRecord]) -> str:
    encoded = []
    for r in records:
        fields = [r.medicine_name, r.dosage, r.frequency, r.duration, r.instructions]
        if r.quantity is not None:
            fields.append(str(r.quantity))
        encoded.append(FIELD_SEPARATOR.join(fields))
    return MEDICATION_SEPARATOR.join(encoded)


# ---------------------------------------------------------------------------
# Lab tests
# ---------------------------------------------------------------------------

def decode_lab_tests(text: Any) -> list[LabTestRecord]:
    if not isinstance(text, str) or not text.strip():
        return []
    records: list[LabTestRecord] = []
    for chunk in text.split(LAB_TEST_SEPARATOR):
        name, instructions, urgency = _fields(chunk, 3)[:3]
        if not name:
            continue
        records.append(LabTestRecord(test_name=name, instructions=instructions, urgency=parse_urgency(urgency)))
    return records


def encode_lab_tests(records: Iterable[LabTestRecord]) -> str:
    return (LAB_TEST_SEPARATOR + ' ').join(
        FIELD_SEPARATOR.join([r.test_name, r.instructions, r.urgency]) for r in records
    )


# ---------------------------------------------------------------------------
# Simple comma lists
# ---------------------------------------------------------------------------

def decode_list(value: Any) -> list[str]:
    """Split a comma list; an already-split list is just cleaned up."""
    if isinstance(value, (list, tuple)):
        items = value
    elif isinstance(value, str):
        items = value.split(LIST_SEPARATOR)
    else:
        return []
    return [s for s in (_text(i) for i in items) if s]


def encode_list(items: Iterable[Any]) -> str:
    return (LIST_SEPARATOR + ' ').join(s for s in (_text(i) for i in items or []) if s)
