from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from logistics.infrastructure.repositories import (
    SQLAlchemyOrderRepository,
    SQLAlchemyUserRepository,
    SQLAlchemyTruckRepository,
    SQLAlchemyLocationRepository
)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        async with self._session_factory() as session:
            try:
                uow_impl = _UnitOfWorkImpl(session)
                yield uow_impl
                # anything not committed is discarded
                await session.rollback()
            except Exception:
                await session.rollback()
                raise


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.orders = SQLAlchemyOrderRepository(session)
        self.users = SQLAlchemyUserRepository(session)
        self.trucks = SQLAlchemyTruckRepository(session)
        self.locations = SQLAlchemyLocationRepository(session)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
