# (c) Copyright Datacraft, 2026
"""
Database engine and sessions.

Request handlers get a session per request through ``get_db``. The
reconciliation loop and the background announcement tasks outlive any
request and open their own sessions from ``AsyncSessionLocal``.
"""
import logging
import ssl

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from storeforge.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _connect_args(settings: Settings) -> dict:
    if not settings.db_ssl:
        return {}
    # asyncpg takes an SSL context rather than sslmode
    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return {"ssl": ssl_context}


settings = get_settings()

engine = create_async_engine(
    settings.async_db_url,
    poolclass=NullPool,
    connect_args=_connect_args(settings),
)

# Saga steps commit as they go; loaded rows must stay readable afterwards
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")
