import redis.asyncio as redis

from backend.app.core.config import settings


def create_redis(url: str | None = None) -> redis.Redis:
    """Build the Redis handle owned by the application lifespan."""
    return redis.from_url(
        url or settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis(client: redis.Redis | None) -> None:
    """Close the Redis connection if it was created."""
    if client is not None:
        await client.aclose()
