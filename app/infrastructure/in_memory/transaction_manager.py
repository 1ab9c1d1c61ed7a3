from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """In-memory adapters apply writes immediately; there is nothing to roll back."""

    def __init__(self) -> None:
        self.started = 0

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        self.started += 1
        yield
