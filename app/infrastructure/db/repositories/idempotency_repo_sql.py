from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from app.infrastructure.db.tables import idempotency_keys


class IdempotencyRepoSQL(IdempotencyRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        row = (
            await self._session.execute(
                select(idempotency_keys).where(
                    idempotency_keys.c.scope == scope,
                    idempotency_keys.c.idem_key == idem_key,
                )
            )
        ).mappings().first()
        if row is None:
            return None
        return IdempotencyRecord(
            scope=row["scope"],
            idem_key=row["idem_key"],
            request_hash=row["request_hash"],
            booking_id=row["booking_id"],
            response_body=row["response_body"] or {},
            status_code=row["status_code"],
            created_at=row["created_at"],
        )

    async def save(self, record: IdempotencyRecord) -> None:
        # Unique (scope, idem_key): a concurrent duplicate fails the whole transaction.
        await self._session.execute(
            insert(idempotency_keys).values(
                scope=record.scope,
                idem_key=record.idem_key,
                request_hash=record.request_hash,
                booking_id=record.booking_id,
                response_body=record.response_body,
                status_code=record.status_code,
                created_at=record.created_at,
            )
        )
