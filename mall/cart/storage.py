"""Durable storage adapters for the cart item list."""
import json
from typing import List, Optional, Protocol, Sequence

from mall.db import get_redis, RedisKeys
from mall.errors import ERROR_STORAGE_CORRUPTED
from mall.logging import get_logger
from .models import CartItem

logger = get_logger(__name__)


class CartStorage(Protocol):
    """Key-value slot holding the serialized item list."""

    async def load(self) -> Optional[List[CartItem]]:
        """Stored items, or None when nothing was saved."""
        ...

    async def save(self, items: Sequence[CartItem]) -> None:
        """Overwrite the slot with ``items``."""
        ...


def serialize_items(items: Sequence[CartItem]) -> str:
    """Encode the item list as a JSON array."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def deserialize_items(payload) -> List[CartItem]:
    """
    Decode a JSON array of cart lines.

    Raises:
        ValueError: If the payload is not a JSON array of valid lines
    """
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    try:
        data = json.loads(payload) if isinstance(payload, str) else payload
        if not isinstance(data, list):
            raise TypeError(f"expected a list, got {type(data).__name__}")
        return [CartItem.from_dict(entry) for entry in data]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValueError(f"{ERROR_STORAGE_CORRUPTED}: {e}") from e


class RedisCartStorage:
    """
    Cart slot in Upstash Redis.

    The whole list is written on every save with no TTL; concurrent
    sessions overwrite each other (last writer wins).
    """

    def __init__(self, redis=None, key: Optional[str] = None):
        self._redis = redis  # Lazy initialization
        self.key = key or RedisKeys.cart_key()

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    async def load(self) -> Optional[List[CartItem]]:
        data = await self.redis.get(self.key)
        if not data:
            return None
        return deserialize_items(data)

    async def save(self, items: Sequence[CartItem]) -> None:
        await self.redis.set(self.key, serialize_items(items))
        logger.debug("Saved %d cart lines to %s", len(items), self.key)


class MemoryCartStorage:
    """In-process slot, used in tests and when Redis is not configured."""

    def __init__(self, initial: Optional[str] = None):
        self.payload: Optional[str] = initial
        self.save_count = 0
        self.load_count = 0

    async def load(self) -> Optional[List[CartItem]]:
        self.load_count += 1
        if self.payload is None:
            return None
        return deserialize_items(self.payload)

    async def save(self, items: Sequence[CartItem]) -> None:
        self.payload = serialize_items(items)
        self.save_count += 1
