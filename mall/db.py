"""
Database Module - Upstash Redis Clients

Provides singleton instances of the Upstash Redis client used as the
durable key-value slot for carts.
"""

import os
from typing import Optional

from upstash_redis import Redis
from upstash_redis.asyncio import Redis as AsyncRedis

from mall.errors import ERROR_REDIS_NOT_CONFIGURED


# Upstash uses REST_URL and REST_TOKEN
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")


# Singleton instances
_redis_client: Optional[AsyncRedis] = None
_sync_redis_client: Optional[Redis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        _redis_client = AsyncRedis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).
    Use only when async is not available (scripts, shells).
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        _sync_redis_client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _sync_redis_client


class RedisKeys:
    """Redis keys for cart data."""

    # Durable cart slot, one JSON array of cart lines
    CART = os.environ.get("MALL_CART_STORAGE_KEY", "mall_cart")

    @staticmethod
    def cart_key(scope: Optional[str] = None) -> str:
        """Cart key, optionally namespaced (e.g. per storefront domain)."""
        if scope:
            return f"{RedisKeys.CART}:{scope}"
        return RedisKeys.CART
