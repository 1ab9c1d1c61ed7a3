"""Puerto de idempotencia para operaciones de escritura repetibles."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class IdempotencyRecord:
    """
    Respuesta guardada bajo (scope, idem_key).

    Un reintento con el mismo hash recibe ``response_body`` tal cual;
    con otro hash es un conflicto.
    """

    scope: str
    idem_key: str
    request_hash: str
    booking_id: str
    response_body: dict[str, Any] = field(default_factory=dict)
    status_code: int = 201
    created_at: datetime | None = None

    def matches(self, request_hash: str) -> bool:
        return self.request_hash == request_hash


class IdempotencyRepo(ABC):
    @abstractmethod
    async def find(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def save(self, record: IdempotencyRecord) -> None:
        """Falla si la clave ya existe en el scope."""
        raise NotImplementedError
