"""Actions accepted by the cart transition function."""
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .models import CartItem


@dataclass(frozen=True)
class AddItem:
    """Add a line or merge it into the line with the same id."""
    item: CartItem


@dataclass(frozen=True)
class RemoveItem:
    item_id: str


@dataclass(frozen=True)
class SetQuantity:
    """Set a line's quantity; zero or below removes the line."""
    item_id: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class ToggleOpen:
    pass


@dataclass(frozen=True)
class SetOpen:
    value: bool


@dataclass(frozen=True)
class LoadItems:
    """Replace all lines (session hydration)."""
    items: Sequence[CartItem]


@dataclass(frozen=True)
class SetLoading:
    value: bool


@dataclass(frozen=True)
class SetError:
    message: Optional[str]


CartAction = Union[
    AddItem,
    RemoveItem,
    SetQuantity,
    ClearCart,
    ToggleOpen,
    SetOpen,
    LoadItems,
    SetLoading,
    SetError,
]
