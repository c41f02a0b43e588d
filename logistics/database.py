from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from logistics.config import settings

engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal
