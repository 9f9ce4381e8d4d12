"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import AsyncMock

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("MALL_API_URL", "https://api.test.mall/api/v1")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from mall.cart import CartState, MemoryCartStorage, make_cart_item  # noqa: E402


@pytest.fixture
def empty_state():
    """Fresh cart state"""
    return CartState()


@pytest.fixture
def memory_storage():
    """Empty in-memory cart slot"""
    return MemoryCartStorage()


@pytest.fixture
def mock_redis():
    """Mock Upstash async Redis client"""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def sample_item():
    """Simple product line without a stock cap"""
    return make_cart_item(
        product_id="p1",
        name="Ceramic Mug",
        unit_price=100000,
        quantity=1,
        name_fa="ماگ سرامیکی",
        image_url="https://cdn.test.mall/mug.jpg",
    )


@pytest.fixture
def sample_variant_item():
    """Variant line capped by stock"""
    return make_cart_item(
        product_id="p2",
        name="T-Shirt",
        unit_price=350000,
        quantity=1,
        variant_id="v1",
        max_quantity=3,
        sku="TS-L-RED",
        attributes={"size": "L", "color": "red"},
    )
