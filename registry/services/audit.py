from typing import Optional, Any, Dict
from registry.models import AuditEvent


def log_action(*, action: str, object_type: Optional[str]=None, object_id: Optional[str]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
