from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.transaction_manager import TransactionManager


class SQLAlchemyTransactionManager(TransactionManager):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._depth = 0

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._depth:
            yield
            return

        self._depth += 1
        try:
            if self._session.in_transaction():
                # Reads issued before the unit of work autobegin a transaction.
                try:
                    yield
                except BaseException:
                    await self._session.rollback()
                    raise
                await self._session.commit()
            else:
                async with self._session.begin():
                    yield
        finally:
            self._depth -= 1
