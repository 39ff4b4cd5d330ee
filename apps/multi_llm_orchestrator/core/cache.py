from typing import Optional

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger(__name__)

HEALTH_CHECK_KEY = "health_check"


class ModelCache:
    """Redis binding for the model cache. Optional: unset URL means not configured."""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        if client is None and redis_url:
            client = redis.from_url(
                redis_url,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def check(self) -> str:
        if self.client is None:
            return "not_configured"

        try:
            await self.client.get(HEALTH_CHECK_KEY)
            return "healthy"
        except RedisError as e:
            logger.error("Cache health check failed", error=str(e))
            return "error"

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
