from registry.exceptions import NotFoundError
from registry.services.storage import default_storage


def get_or_404(store, kind, entity_id):
    entity = store.get(kind, entity_id)
    if entity is None:
        raise NotFoundError(kind, entity_id)
    return entity


def storage():
    return default_storage()
