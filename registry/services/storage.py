"""
Entity storage used by the registry services.

:class:`EntityStore` is the narrow interface the prescription core
depends on: get/create/update/delete by opaque id plus listing by
ancestor id.  :class:`ModelStorage` implements it on top of the Django
ORM; tests for the core can swap in any object with the same methods.

Entities are addressed by *kind*: ``hospital``, ``opd``, ``doctor``,
``patient`` and ``prescription``.  Field names are the model field
names, so ancestor references are written as ``hospital_id`` etc.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import models
from django.db.models.functions import Length

from registry.models import Doctor, Hospital, Opd, Patient, Prescription
from registry.services.audit import log_action

logger = logging.getLogger(__name__)

KIND_MODELS = {
    'hospital': Hospital,
    'opd': Opd,
    'doctor': Doctor,
    'patient': Patient,
    'prescription': Prescription,
}

DEFAULT_ORDERING = {
    'hospital': '-created_at',
    'opd': '-created_at',
    'doctor': '-created_at',
    'patient': '-registration_date',
    'prescription': '-visit_date',
}


class EntityStore:
    """Interface of the storage collaborator."""

    def get(self, kind: str, entity_id: Any) -> Optional[Any]:
        raise NotImplementedError

    def create(self, kind: str, fields: dict) -> Any:
        raise NotImplementedError

    def update(self, kind: str, entity_id: Any, fields: dict) -> Optional[Any]:
        raise NotImplementedError

    def delete(self, kind: str, entity_id: Any) -> bool:
        raise NotImplementedError

    def list(self, kind: str, *, limit: Optional[int] = None, **filters) -> list:
        raise NotImplementedError

    def latest(self, kind: str, field: str) -> Optional[Any]:
        """Entity with the greatest value of ``field``, or ``None``.

        Text values compare by length first, so zero-padded numeric codes
        keep their numeric order once they outgrow the padding.
        """
        raise NotImplementedError


class ModelStorage(EntityStore):
    def _model(self, kind: str):
        try:
            return KIND_MODELS[kind]
        except KeyError:
            raise ValueError(f'unknown entity kind {kind!r}') from None

    def get(self, kind, entity_id):
        if not entity_id:
            return None
        return self._model(kind).objects.filter(pk=str(entity_id)).first()

    def create(self, kind, fields):
        obj = self._model(kind).objects.create(**fields)
        log_action(action=f'{kind}_create', object_type=kind, object_id=obj.pk)
        logger.info('created %s %s', kind, obj.pk)
        return obj

    def update(self, kind, entity_id, fields):
        obj = self.get(kind, entity_id)
        if obj is None:
            return None
        for name, value in fields.items():
            setattr(obj, name, value)
        obj.save()
        log_action(action=f'{kind}_update', object_type=kind, object_id=obj.pk, detail={'fields': sorted(fields)})
        return obj

    def delete(self, kind, entity_id):
        obj = self.get(kind, entity_id)
        if obj is None:
            return False
        pk = obj.pk
        obj.delete()
        log_action(action=f'{kind}_delete', object_type=kind, object_id=pk)
        logger.info('deleted %s %s', kind, pk)
        return True

    def list(self, kind, *, limit=None, **filters):
        qs = self._model(kind).objects.filter(**filters).order_by(DEFAULT_ORDERING[kind])
        if limit:
            qs = qs[:limit]
        return list(qs)

    def latest(self, kind, field):
        model = self._model(kind)
        ordering = [f'-{field}']
        if isinstance(model._meta.get_field(field), models.CharField):
            # Longer codes sort later: PAT10000 comes after PAT9999
            ordering.insert(0, Length(field).desc())
        return model.objects.order_by(*ordering).first()


def default_storage() -> ModelStorage:
    return ModelStorage()
