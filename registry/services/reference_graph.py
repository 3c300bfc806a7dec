"""
Ancestor derivation for the hospital -> OPD -> doctor -> patient chain.

A child entity never takes its ancestor ids from the caller.  Instead
the immediate parent is looked up and its own ancestor fields are
copied, so a patient can only ever be registered under a doctor/OPD/
hospital triple that actually exists together.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from registry.exceptions import MissingParent

logger = logging.getLogger(__name__)

PARENT_KINDS = ('hospital', 'opd', 'doctor', 'patient')


@dataclass(frozen=True)
class Ancestry:
    hospital_id: Optional[str] = None
    opd_id: Optional[str] = None
    doctor_id: Optional[str] = None

    def as_fields(self) -> dict:
        """Model field values for a child created under this ancestry."""
        fields = {'hospital_id': self.hospital_id}
        if self.opd_id is not None:
            fields['opd_id'] = self.opd_id
        if self.doctor_id is not None:
            fields['doctor_id'] = self.doctor_id
        return fields


class ReferenceGraph:
    def __init__(self, store) -> None:
        self.store = store

    def _lookup(self, kind: str, entity_id: Any):
        entity = self.store.get(kind, entity_id) if entity_id else None
        if entity is None:
            logger.info('missing %s %r during ancestor derivation', kind, entity_id)
            raise MissingParent(kind, entity_id)
        return entity

    def derive_ancestors(self, parent_id: Any, parent_kind: str) -> Ancestry:
        if parent_kind not in PARENT_KINDS:
            raise ValueError(f'{parent_kind!r} cannot be a parent')
        parent = self._lookup(parent_kind, parent_id)

        if parent_kind == 'hospital':
            return Ancestry(hospital_id=parent.id)
        if parent_kind == 'opd':
            return Ancestry(hospital_id=parent.hospital_id, opd_id=parent.id)
        if parent_kind == 'doctor':
            opd = self._lookup('opd', parent.opd_id)
            return Ancestry(hospital_id=opd.hospital_id, opd_id=opd.id, doctor_id=parent.id)
        # patient: its registration-time snapshot
        return Ancestry(hospital_id=parent.hospital_id, opd_id=parent.opd_id, doctor_id=parent.doctor_id)

    def is_consistent(self, kind: str, entity) -> bool:
        """Whether a patient/prescription still matches a live walk from its doctor."""
        if kind not in ('patient', 'prescription'):
            raise ValueError(f'consistency is only defined for patients and prescriptions, not {kind!r}')
        try:
            live = self.derive_ancestors(entity.doctor_id, 'doctor')
        except MissingParent:
            return False
        return (entity.hospital_id, entity.opd_id) == (live.hospital_id, live.opd_id)
