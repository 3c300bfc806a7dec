import logging
from typing import Optional

from registry.exceptions import NotFoundError
from registry.services.reference_graph import ReferenceGraph

logger = logging.getLogger(__name__)

PATIENT_CODE_PREFIX = 'PAT'
# Ancestor ids and the code are always computed here, never accepted from callers
DERIVED_FIELDS = ('opd_id', 'hospital_id', 'patient_code')


def next_patient_code(store) -> str:
    last = store.latest('patient', 'patient_code')
    number = 1
    if last is not None and last.patient_code:
        try:
            number = int(last.patient_code.replace(PATIENT_CODE_PREFIX, '')) + 1
        except ValueError:
            logger.warning('unexpected patient code %r, restarting numbering', last.patient_code)
    return f"{PATIENT_CODE_PREFIX}{number:04d}"


def register_patient(store, data: dict, *, graph: Optional[ReferenceGraph] = None):
    """Create a patient under the doctor named by ``data['doctor_id']``.

    The OPD and hospital are copied from that doctor's chain; any
    ``opd_id``/``hospital_id`` in ``data`` is ignored.
    """
    graph = graph or ReferenceGraph(store)
    ancestry = graph.derive_ancestors(data.get('doctor_id'), 'doctor')
    fields = {k: v for k, v in data.items() if k not in DERIVED_FIELDS}
    fields.update(ancestry.as_fields())
    fields['patient_code'] = next_patient_code(store)
    return store.create('patient', fields)


def update_patient(store, patient_id, data: dict, *, graph: Optional[ReferenceGraph] = None):
    """Apply an edit; re-assigning the doctor re-derives the OPD and hospital."""
    if store.get('patient', patient_id) is None:
        raise NotFoundError('patient', patient_id)
    fields = {k: v for k, v in data.items() if k not in DERIVED_FIELDS}
    if fields.get('doctor_id'):
        graph = graph or ReferenceGraph(store)
        fields.update(graph.derive_ancestors(fields['doctor_id'], 'doctor').as_fields())
    else:
        fields.pop('doctor_id', None)
    return store.update('patient', patient_id, fields)
