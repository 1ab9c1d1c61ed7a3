from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """Unit of work: everything awaited inside ``start()`` commits or rolls back together."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
