from typing import Sequence

from app.domain.entities.webhook_event import AuditLogEntry


class AuditLogRepo:
    async def add(self, entry: AuditLogEntry) -> None:
        raise NotImplementedError

    async def list_for_entity(self, entity_type: str, entity_id: str) -> Sequence[AuditLogEntry]:
        raise NotImplementedError
