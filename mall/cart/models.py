"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple

from mall.money import to_decimal, multiply, format_toman, to_float

# Ceiling used when the caller supplies no stock cap
DEFAULT_MAX_QUANTITY = 999


@dataclass
class CartItem:
    """Single line in the cart, keyed by ``id``."""
    id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    variant_id: Optional[str] = None
    max_quantity: Optional[int] = None
    name_fa: Optional[str] = None
    image_url: Optional[str] = None
    sku: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.unit_price = to_decimal(self.unit_price)
        self.quantity = int(self.quantity)
        if self.max_quantity is not None:
            self.max_quantity = int(self.max_quantity)
        if self.attributes is None:
            self.attributes = {}

    @property
    def effective_max(self) -> int:
        """Quantity ceiling for this line."""
        if self.max_quantity is not None:
            return self.max_quantity
        return DEFAULT_MAX_QUANTITY

    @property
    def line_total(self) -> Decimal:
        """Price for all units of this line."""
        return multiply(self.unit_price, self.quantity)

    @property
    def display_name(self) -> str:
        return self.name_fa or self.name

    def to_dict(self) -> dict:
        """Convert to dictionary for durable storage."""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "name": self.name,
            "name_fa": self.name_fa,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "max_quantity": self.max_quantity,
            "image_url": self.image_url,
            "sku": self.sku,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """Create from dictionary. Raises KeyError/TypeError/ValueError on bad data."""
        return cls(
            id=str(data["id"]),
            product_id=str(data["product_id"]),
            name=data["name"],
            unit_price=_parse_price(data["unit_price"]),
            quantity=int(data["quantity"]),
            variant_id=data.get("variant_id"),
            max_quantity=data.get("max_quantity"),
            name_fa=data.get("name_fa"),
            image_url=data.get("image_url"),
            sku=data.get("sku"),
            attributes=dict(data.get("attributes") or {}),
        )


def _parse_price(value) -> Decimal:
    """Strict price parsing for stored lines; raises ValueError on bad input."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"invalid unit_price: {value!r}")
    try:
        price = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"invalid unit_price: {value!r}") from e
    if not price.is_finite() or price < 0:
        raise ValueError(f"invalid unit_price: {value!r}")
    return price


def make_cart_item(
    product_id: str,
    name: str,
    unit_price,
    quantity: int = 1,
    variant_id: Optional[str] = None,
    max_quantity: Optional[int] = None,
    **display,
) -> CartItem:
    """
    Build a cart line for a product or one of its variants.

    The line id is the variant id when present, else the product id, so
    repeated adds of the same variant merge into one line.

    Args:
        product_id: Product reference
        name: Display name
        unit_price: Price per unit
        quantity: Requested quantity
        variant_id: Optional variant reference
        max_quantity: Stock ceiling known at add time
        **display: name_fa, image_url, sku, attributes

    Returns:
        CartItem ready for ``AddItem``
    """
    return CartItem(
        id=variant_id or product_id,
        product_id=product_id,
        name=name,
        unit_price=unit_price,
        quantity=quantity,
        variant_id=variant_id,
        max_quantity=max_quantity,
        **display,
    )


@dataclass(frozen=True)
class CartState:
    """
    Cart aggregate.

    Only ``items`` and the flags are stored; counts and totals are derived
    from ``items`` on access and cannot be set.
    """
    items: Tuple[CartItem, ...] = ()
    is_open: bool = False
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def item_count(self) -> int:
        """Total number of units in cart."""
        return sum(item.quantity for item in self.items)

    @property
    def total_amount(self) -> Decimal:
        """Sum of unit price times quantity over all lines."""
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, item_id: str) -> Optional[CartItem]:
        """Line with the given id, if any."""
        return next((item for item in self.items if item.id == item_id), None)

    def get_item(self, product_id: str, variant_id: Optional[str] = None) -> Optional[CartItem]:
        """Line for a product/variant pair, if any."""
        return next(
            (
                item for item in self.items
                if item.product_id == product_id and item.variant_id == variant_id
            ),
            None,
        )

    def is_in_cart(self, product_id: str, variant_id: Optional[str] = None) -> bool:
        return self.get_item(product_id, variant_id) is not None

    def summary(self) -> dict:
        """JSON-ready cart summary for UI consumers."""
        if not self.items:
            return {
                "is_empty": True,
                "item_count": 0,
                "total_amount": 0,
                "total_display": format_toman(0),
                "items": [],
                "is_open": self.is_open,
            }

        return {
            "is_empty": False,
            "item_count": self.item_count,
            "total_amount": to_float(self.total_amount),
            "total_display": format_toman(self.total_amount),
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "variant_id": item.variant_id,
                    "name": item.display_name,
                    "quantity": item.quantity,
                    "max_quantity": item.effective_max,
                    "unit_price": to_float(item.unit_price),
                    "total": to_float(item.line_total),
                    "image_url": item.image_url,
                    "attributes": dict(item.attributes),
                }
                for item in self.items
            ],
            "is_open": self.is_open,
        }
