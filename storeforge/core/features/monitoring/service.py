import logging

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storeforge.core.db.engine import AsyncSessionLocal
from storeforge.core.config import get_settings
from storeforge.core.features.provisioning.dependencies import get_event_publisher

logger = logging.getLogger(__name__)
settings = get_settings()


async def check_db_status() -> bool:
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database health check failed: {e}")
        return False


async def check_redis_status() -> bool:
    if settings.redis_url is None:
        return False
    client = redis.from_url(str(settings.redis_url))
    try:
        return await client.ping()
    except (RedisError, OSError) as e:
        logger.error(f"Redis health check failed: {e}")
        return False
    finally:
        await client.aclose()


async def check_event_bus_status() -> dict:
    return await get_event_publisher().health()
