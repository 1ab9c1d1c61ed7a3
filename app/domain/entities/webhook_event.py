"""Entidades de registro: WebhookEvent y AuditLogEntry."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class WebhookEvent:
    """
    Evento entrante del procesador de pagos.

    Se registra antes de procesarlo; el event_id es único y sólo cambian
    las columnas de procesamiento.
    """

    event_id: str
    event_type: str
    payload: dict[str, Any]
    provider: str = "stripe"
    processed: bool = False
    processed_at: datetime | None = None
    processing_error: str | None = None
    created_at: datetime | None = None
    id: int | None = None

    def mark_processed(self, at: datetime) -> None:
        self.processed = True
        self.processed_at = at
        self.processing_error = None

    def mark_failed(self, error: str) -> None:
        self.processed = False
        self.processing_error = error


@dataclass
class AuditLogEntry:
    """Registro de auditoría de un cambio aplicado por el sistema."""

    entity_type: str
    entity_id: str
    action: str
    changes: dict[str, Any] = field(default_factory=dict)
    user_id: str | None = None
    created_at: datetime | None = None
    id: int | None = None
