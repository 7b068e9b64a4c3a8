# app/config/redis.py
"""Redis connection for the Celery broker that carries pending-payment tasks"""
import redis.asyncio as redis

from app.config.settings import get_settings


def get_broker_client() -> redis.Redis:
    """Short-lived async client on the Celery broker URL"""
    settings = get_settings()
    return redis.Redis.from_url(
        settings.CELERY_BROKER_URL,
        socket_connect_timeout=settings.BROKER_HEALTH_TIMEOUT_SECONDS,
        socket_timeout=settings.BROKER_HEALTH_TIMEOUT_SECONDS,
    )


async def ping_broker() -> bool:
    """True when the broker answers PING; connection errors propagate"""
    client = get_broker_client()
    try:
        return bool(await client.ping())
    finally:
        await client.aclose()
