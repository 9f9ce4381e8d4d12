"""Cart store: owns the cart state, publishes changes and mirrors items to storage."""
import inspect
from typing import Awaitable, Callable, List, Optional, Union

from mall.errors import ERROR_STORAGE_UNAVAILABLE
from mall.logging import get_logger, sanitize_id_for_logging
from .actions import (
    AddItem,
    ClearCart,
    LoadItems,
    RemoveItem,
    SetOpen,
    SetQuantity,
    ToggleOpen,
)
from .models import CartItem, CartState
from .reducer import apply
from .storage import CartStorage, RedisCartStorage

logger = get_logger(__name__)

Listener = Callable[[CartState, CartState], Union[None, Awaitable[None]]]


class CartStore:
    """
    Session cart store.

    Actions go through the pure ``apply`` function; every new state is
    published to subscribers in registration order. The first subscriber
    is the store's own persistence observer, which writes the item list
    to storage whenever it changes, but only once hydration is done.

    Usage:
        store = await CartStore.create(storage)
        unsubscribe = store.subscribe(on_change)
        await store.add_item(make_cart_item("p1", "Mug", 100000))
    """

    def __init__(self, storage: Optional[CartStorage] = None):
        self._storage = storage if storage is not None else RedisCartStorage()
        self._state = CartState()
        self._listeners: List[Listener] = []
        self._hydration_started = False
        self._hydrated = False
        self.subscribe(self._persist_items)

    @classmethod
    async def create(cls, storage: Optional[CartStorage] = None) -> "CartStore":
        """Create a store and hydrate it from storage."""
        store = cls(storage)
        await store.hydrate()
        return store

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called as ``listener(state, previous)``.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def dispatch(self, action) -> CartState:
        """Apply an action and publish the resulting state."""
        previous = self._state
        self._state = apply(previous, action)

        if self._state is not previous:
            await self._publish(self._state, previous)

        return self._state

    async def _publish(self, state: CartState, previous: CartState) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(state, previous)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Cart listener %r failed", listener)

    async def hydrate(self) -> CartState:
        """
        Load saved items once per store.

        A missing, malformed or unreachable slot leaves the cart as is
        (empty unless the user already added something). Never retried.
        Items added before hydration are not written back here; they stay
        in memory only until the next change persists them.
        """
        if self._hydration_started:
            return self._state
        self._hydration_started = True

        loaded: Optional[List[CartItem]] = None
        try:
            loaded = await self._storage.load()
        except ValueError as e:
            logger.warning(f"Ignoring saved cart: {e}")
        except Exception as e:
            logger.error(f"{ERROR_STORAGE_UNAVAILABLE}, starting with an empty cart: {e}")

        try:
            if loaded is not None:
                await self.dispatch(LoadItems(loaded))
                logger.info("Cart hydrated with %d lines", len(self._state.items))
        finally:
            self._hydrated = True

        return self._state

    async def _persist_items(self, state: CartState, previous: CartState) -> None:
        if not self._hydrated or state.items is previous.items:
            return
        try:
            await self._storage.save(state.items)
        except Exception as e:
            logger.error(f"{ERROR_STORAGE_UNAVAILABLE}, cart not saved: {e}")

    # Convenience wrappers

    async def add_item(self, item: CartItem) -> CartState:
        logger.debug("Adding %s x%d to cart", sanitize_id_for_logging(item.id), item.quantity)
        return await self.dispatch(AddItem(item))

    async def remove_item(self, item_id: str) -> CartState:
        return await self.dispatch(RemoveItem(item_id))

    async def set_quantity(self, item_id: str, quantity: int) -> CartState:
        return await self.dispatch(SetQuantity(item_id, quantity))

    async def clear(self) -> CartState:
        return await self.dispatch(ClearCart())

    async def toggle_open(self) -> CartState:
        return await self.dispatch(ToggleOpen())

    async def set_open(self, value: bool) -> CartState:
        return await self.dispatch(SetOpen(value))


# Singleton instance
_cart_store: Optional[CartStore] = None


def get_cart_store() -> CartStore:
    """Get CartStore singleton (Redis-backed, not yet hydrated)."""
    global _cart_store
    if _cart_store is None:
        _cart_store = CartStore()
    return _cart_store
