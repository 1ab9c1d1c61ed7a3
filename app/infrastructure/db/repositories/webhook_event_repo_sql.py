from datetime import datetime
from typing import Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.webhook_event_repo import WebhookEventRepo
from app.domain.entities.webhook_event import AuditLogEntry, WebhookEvent
from app.infrastructure.db.tables import audit_logs, webhook_events


class WebhookEventRepoSQL(WebhookEventRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, event: WebhookEvent) -> WebhookEvent:
        existing = await self.get(event.event_id)
        if existing:
            return existing
        # A concurrent delivery of the same event_id fails here on the unique
        # constraint; the transaction rolls back and Stripe redelivers.
        result = await self._session.execute(
            insert(webhook_events).values(
                event_id=event.event_id,
                provider=event.provider,
                event_type=event.event_type,
                payload=event.payload,
                processed=False,
                created_at=event.created_at,
            )
        )
        event.id = result.inserted_primary_key[0]
        return event

    async def get(self, event_id: str) -> WebhookEvent | None:
        result = await self._session.execute(
            select(webhook_events).where(webhook_events.c.event_id == event_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None
        return WebhookEvent(
            id=row["id"],
            event_id=row["event_id"],
            event_type=row["event_type"],
            payload=row["payload"],
            provider=row["provider"],
            processed=row["processed"],
            processed_at=row["processed_at"],
            processing_error=row["processing_error"],
            created_at=row["created_at"],
        )

    async def mark_processed(self, event_id: str, processed_at: datetime) -> None:
        await self._session.execute(
            update(webhook_events)
            .where(webhook_events.c.event_id == event_id)
            .values(processed=True, processed_at=processed_at, processing_error=None)
        )

    async def mark_failed(self, event_id: str, error: str) -> None:
        await self._session.execute(
            update(webhook_events)
            .where(webhook_events.c.event_id == event_id)
            .values(processed=False, processing_error=error[:2000])
        )


class AuditLogRepoSQL(AuditLogRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entry: AuditLogEntry) -> None:
        await self._session.execute(
            insert(audit_logs).values(
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                action=entry.action,
                changes=entry.changes,
                user_id=entry.user_id,
                created_at=entry.created_at,
            )
        )

    async def list_for_entity(self, entity_type: str, entity_id: str) -> Sequence[AuditLogEntry]:
        result = await self._session.execute(
            select(audit_logs)
            .where(audit_logs.c.entity_type == entity_type, audit_logs.c.entity_id == entity_id)
            .order_by(audit_logs.c.id)
        )
        return [
            AuditLogEntry(
                id=row["id"],
                entity_type=row["entity_type"],
                entity_id=row["entity_id"],
                action=row["action"],
                changes=row["changes"] or {},
                user_id=row["user_id"],
                created_at=row["created_at"],
            )
            for row in result.mappings().all()
        ]
