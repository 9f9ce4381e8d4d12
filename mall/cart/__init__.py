"""Cart package: models, transition function, storage, and store."""
from .actions import (
    AddItem,
    CartAction,
    ClearCart,
    LoadItems,
    RemoveItem,
    SetError,
    SetLoading,
    SetOpen,
    SetQuantity,
    ToggleOpen,
)
from .models import DEFAULT_MAX_QUANTITY, CartItem, CartState, make_cart_item
from .reducer import apply
from .storage import CartStorage, MemoryCartStorage, RedisCartStorage
from .store import CartStore, get_cart_store

__all__ = [
    "AddItem",
    "CartAction",
    "ClearCart",
    "LoadItems",
    "RemoveItem",
    "SetError",
    "SetLoading",
    "SetOpen",
    "SetQuantity",
    "ToggleOpen",
    "DEFAULT_MAX_QUANTITY",
    "CartItem",
    "CartState",
    "make_cart_item",
    "apply",
    "CartStorage",
    "MemoryCartStorage",
    "RedisCartStorage",
    "CartStore",
    "get_cart_store",
]
