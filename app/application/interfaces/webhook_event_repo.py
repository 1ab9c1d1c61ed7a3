from datetime import datetime

from app.domain.entities.webhook_event import WebhookEvent


class WebhookEventRepo:
    async def record(self, event: WebhookEvent) -> WebhookEvent:
        """Inserts the event unless its event_id exists; returns the stored row."""
        raise NotImplementedError

    async def get(self, event_id: str) -> WebhookEvent | None:
        raise NotImplementedError

    async def mark_processed(self, event_id: str, processed_at: datetime) -> None:
        raise NotImplementedError

    async def mark_failed(self, event_id: str, error: str) -> None:
        raise NotImplementedError
