import uuid
from types import SimpleNamespace

import pytest
from django.core.cache import cache

from registry.services.storage import EntityStore


class MemoryStore(EntityStore):
    """Dict-backed store for exercising the services without a database."""

    def __init__(self):
        self.entities = {}
        self.created = []

    def get(self, kind, entity_id):
        if not entity_id:
            return None
        return self.entities.get((kind, entity_id))

    def create(self, kind, fields):
        entity = SimpleNamespace(id=uuid.uuid4().hex, **fields)
        self.entities[(kind, entity.id)] = entity
        self.created.append((kind, entity.id))
        return entity

    def update(self, kind, entity_id, fields):
        entity = self.get(kind, entity_id)
        if entity is None:
            return None
        for name, value in fields.items():
            setattr(entity, name, value)
        return entity

    def delete(self, kind, entity_id):
        return self.entities.pop((kind, entity_id), None) is not None

    def list(self, kind, *, limit=None, **filters):
        items = [e for (k, _), e in self.entities.items()
                 if k == kind and all(getattr(e, f, None) == v for f, v in filters.items())]
        return items[:limit] if limit else items

    def latest(self, kind, field):
        items = [e for (k, _), e in self.entities.items() if k == kind and getattr(e, field, None)]
        def key(e):
            value = getattr(e, field)
            return (len(value), value) if isinstance(value, str) else (0, value)
        return max(items, key=key, default=None)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def chain(store):
    """Two hospitals, each with one OPD and one doctor."""
    h1 = store.create('hospital', {'name': 'North'})
    o1 = store.create('opd', {'hospital_id': h1.id, 'name': 'General'})
    d1 = store.create('doctor', {'opd_id': o1.id, 'name': 'Rao'})
    h2 = store.create('hospital', {'name': 'South'})
    o2 = store.create('opd', {'hospital_id': h2.id, 'name': 'ENT'})
    d2 = store.create('doctor', {'opd_id': o2.id, 'name': 'Iyer'})
    return SimpleNamespace(h1=h1, o1=o1, d1=d1, h2=h2, o2=o2, d2=d2)


@pytest.fixture(autouse=True)
def _reset_throttle_cache():
    # Throttle history lives in the local-memory cache
    cache.clear()
    yield
