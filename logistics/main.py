import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from sqlalchemy import text

from logistics.config import settings
from logistics.database import engine, get_session_factory
from logistics.infrastructure.db_schema import metadata
from logistics.presentation import auth_api, users_api, trucks_api, locations_api, orders_api

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup, dispose the pool on shutdown"""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Tables ready")

    yield

    logger.info("Application shutting down...")
    await engine.dispose()


app = FastAPI(
    title="Logistics Service",
    description="Users, trucks, locations and orders",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(auth_api.router)
app.include_router(users_api.router)
app.include_router(trucks_api.router)
app.include_router(locations_api.router)
app.include_router(orders_api.router)


@app.get("/")
async def root():
    return {"message": "Logistics Service is running"}


@app.get("/health")
async def health(session_factory=Depends(get_session_factory)):
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        state = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        state = "disconnected"
    return {"app": "ok", "db": {"state": state}}
