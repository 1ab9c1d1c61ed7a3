from datetime import datetime
from typing import Sequence

from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.webhook_event_repo import WebhookEventRepo
from app.domain.entities.webhook_event import AuditLogEntry, WebhookEvent


class InMemoryWebhookEventRepo(WebhookEventRepo):
    def __init__(self) -> None:
        self.events: dict[str, WebhookEvent] = {}

    async def record(self, event: WebhookEvent) -> WebhookEvent:
        existing = self.events.get(event.event_id)
        if existing:
            return existing
        event.id = len(self.events) + 1
        self.events[event.event_id] = event
        return event

    async def get(self, event_id: str) -> WebhookEvent | None:
        return self.events.get(event_id)

    async def mark_processed(self, event_id: str, processed_at: datetime) -> None:
        self.events[event_id].mark_processed(processed_at)

    async def mark_failed(self, event_id: str, error: str) -> None:
        self.events[event_id].mark_failed(error)


class InMemoryAuditLogRepo(AuditLogRepo):
    def __init__(self) -> None:
        self.entries: list[AuditLogEntry] = []

    async def add(self, entry: AuditLogEntry) -> None:
        entry.id = len(self.entries) + 1
        self.entries.append(entry)

    async def list_for_entity(self, entity_type: str, entity_id: str) -> Sequence[AuditLogEntry]:
        return [
            e for e in self.entries if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def actions(self) -> list[str]:
        return [e.action for e in self.entries]
