"""
Mall Core Module

This package contains the storefront cart core:
- cart: cart state machine, store and persistence adapters
- db: Upstash Redis clients
- money: Decimal money helpers and Persian formatting
- stock: low-stock warning decisions
- api_client: async client for the remote cart API

Note: Imports are lazy so that loading the package does not require
Redis or HTTP configuration.
"""

__all__ = [
    "get_redis",
    "get_cart_store",
    "CartStore",
    "MallApiClient",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "get_redis":
        from mall.db import get_redis
        return get_redis
    elif name == "get_cart_store":
        from mall.cart import get_cart_store
        return get_cart_store
    elif name == "CartStore":
        from mall.cart import CartStore
        return CartStore
    elif name == "MallApiClient":
        from mall.api_client import MallApiClient
        return MallApiClient
    raise AttributeError(f"module 'mall' has no attribute '{name}'")
