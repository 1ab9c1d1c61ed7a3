from app.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo


class InMemoryIdempotencyRepo(IdempotencyRepo):
    def __init__(self) -> None:
        self._records: dict[tuple[str, str], IdempotencyRecord] = {}

    async def find(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        return self._records.get((scope, idem_key))

    async def save(self, record: IdempotencyRecord) -> None:
        key = (record.scope, record.idem_key)
        if key in self._records:
            raise ValueError(f"Idempotency key already stored: {record.idem_key}")
        self._records[key] = record
