"""
Cart transition function.

``apply(state, action)`` is pure and total: it never mutates its inputs,
never raises on bad arguments (they are clamped or ignored), and returns
the same state object when nothing changes.
"""
from dataclasses import replace
from typing import Iterable, List, Tuple

from .actions import (
    AddItem,
    ClearCart,
    LoadItems,
    RemoveItem,
    SetError,
    SetLoading,
    SetOpen,
    SetQuantity,
    ToggleOpen,
)
from .models import CartItem, CartState


def clamp_quantity(quantity: int, ceiling: int) -> int:
    """Clamp to ``[1, ceiling]``. A ceiling below 1 yields the ceiling."""
    return min(max(quantity, 1), ceiling)


def _copy_line(item: CartItem, quantity: int) -> CartItem:
    return replace(item, quantity=quantity, attributes=dict(item.attributes))


def _with_items(state: CartState, items: Iterable[CartItem], **changes) -> CartState:
    return replace(state, items=tuple(items), **changes)


def _add_item(state: CartState, item: CartItem) -> CartState:
    if item.quantity < 1:
        return state

    lines: List[CartItem] = list(state.items)
    index = next((i for i, line in enumerate(lines) if line.id == item.id), None)

    if index is None:
        quantity = min(item.quantity, item.effective_max)
        if quantity <= 0:
            return state
        lines.append(_copy_line(item, quantity))
    else:
        existing = lines[index]
        # A ceiling supplied with the add is the latest stock cap
        if item.max_quantity is not None:
            existing = replace(existing, max_quantity=min(existing.effective_max, item.max_quantity))
        quantity = min(existing.quantity + item.quantity, existing.effective_max)
        if quantity <= 0:
            del lines[index]
        else:
            lines[index] = _copy_line(existing, quantity)

    return _with_items(state, lines, error=None)


def _remove_item(state: CartState, item_id: str) -> CartState:
    if state.find(item_id) is None:
        return state
    return _with_items(state, (line for line in state.items if line.id != item_id))


def _set_quantity(state: CartState, item_id: str, quantity) -> CartState:
    try:
        requested = int(quantity)
    except (TypeError, ValueError):
        return state

    existing = state.find(item_id)
    if existing is None:
        return state

    if requested <= 0:
        return _remove_item(state, item_id)

    resolved = clamp_quantity(requested, existing.effective_max)
    if resolved <= 0:
        return _remove_item(state, item_id)
    if resolved == existing.quantity:
        return state

    return _with_items(
        state,
        (_copy_line(line, resolved) if line.id == item_id else line for line in state.items),
    )


def normalize_items(items: Iterable[CartItem]) -> Tuple[CartItem, ...]:
    """
    Bring a loaded sequence back under the cart invariants.

    Lines with quantity <= 0 are dropped, quantities are capped at the
    line ceiling, and duplicate ids merge into their first occurrence.
    Already-valid input comes back unchanged in order and content.
    """
    lines: List[CartItem] = []
    positions = {}

    for item in items:
        if item.id in positions:
            index = positions[item.id]
            existing = lines[index]
            merged = min(existing.quantity + max(item.quantity, 0), existing.effective_max)
            lines[index] = _copy_line(existing, merged)
            continue

        quantity = min(item.quantity, item.effective_max)
        if quantity <= 0:
            continue
        positions[item.id] = len(lines)
        lines.append(_copy_line(item, quantity))

    return tuple(lines)


def apply(state: CartState, action) -> CartState:
    """
    Compute the next cart state.

    Args:
        state: Current state
        action: One of the actions in ``mall.cart.actions``

    Returns:
        Next state; ``state`` itself for no-ops and unrecognized actions
    """
    if isinstance(action, AddItem):
        return _add_item(state, action.item)

    if isinstance(action, RemoveItem):
        return _remove_item(state, action.item_id)

    if isinstance(action, SetQuantity):
        return _set_quantity(state, action.item_id, action.quantity)

    if isinstance(action, ClearCart):
        if not state.items:
            return state
        return _with_items(state, ())

    if isinstance(action, ToggleOpen):
        return replace(state, is_open=not state.is_open)

    if isinstance(action, SetOpen):
        value = bool(action.value)
        if value == state.is_open:
            return state
        return replace(state, is_open=value)

    if isinstance(action, LoadItems):
        return _with_items(state, normalize_items(action.items or ()), is_loading=False)

    if isinstance(action, SetLoading):
        return replace(state, is_loading=bool(action.value))

    if isinstance(action, SetError):
        return replace(state, error=action.message, is_loading=False)

    return state
