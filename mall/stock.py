"""
Low-stock warning decisions for storefront customers.

Stock numbers come from the product API; this module only decides what
to warn about. The cart itself never consults it: callers pass the
stock count as ``max_quantity`` when building a cart line.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from mall.money import to_persian_digits

LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "3"))

MESSAGE_OUT_OF_STOCK = "ناموجود"
MESSAGE_SOME_OPTIONS_OUT = "برخی گزینه‌ها ناموجود"
MESSAGE_LIMITED_STOCK = "موجودی محدود"


class StockLevel(str, Enum):
    """Stock warning level."""
    OUT_OF_STOCK = "out_of_stock"
    CRITICAL = "critical"
    LOW = "low"
    NORMAL = "normal"


@dataclass
class VariantStock:
    """Stock snapshot for one product variant."""
    id: str
    stock_quantity: int
    sku: str = ""
    is_active: bool = True


@dataclass
class StockStatus:
    level: StockLevel
    stock_quantity: int
    needs_warning: bool
    message: str = ""
    variant_id: Optional[str] = None
    variants: List["StockStatus"] = field(default_factory=list)

    @property
    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    def to_dict(self) -> dict:
        data = {
            "level": self.level.value,
            "stock_quantity": self.stock_quantity,
            "needs_warning": self.needs_warning,
            "is_in_stock": self.is_in_stock,
            "warning_message": self.message,
        }
        if self.variant_id is not None:
            data["variant_id"] = self.variant_id
        if self.variants:
            data["variants"] = [variant.to_dict() for variant in self.variants]
        return data


def remaining_message(quantity: int) -> str:
    """'Only N left' in Persian."""
    return f"تنها {to_persian_digits(quantity)} عدد باقی مانده"


def assess_stock(quantity: int, threshold: int = LOW_STOCK_THRESHOLD) -> StockStatus:
    """
    Decide the warning for a single stock count.

    The threshold is inclusive: with the default of 3, a count of 3
    already warns.
    """
    quantity = max(int(quantity or 0), 0)

    if quantity == 0:
        return StockStatus(StockLevel.OUT_OF_STOCK, 0, True, MESSAGE_OUT_OF_STOCK)
    if quantity <= 1:
        return StockStatus(StockLevel.CRITICAL, quantity, True, remaining_message(quantity))
    if quantity <= threshold:
        return StockStatus(StockLevel.LOW, quantity, True, remaining_message(quantity))
    return StockStatus(StockLevel.NORMAL, quantity, False)


def assess_product_stock(
    stock_quantity: int,
    variants: Optional[Sequence[VariantStock]] = None,
    threshold: int = LOW_STOCK_THRESHOLD,
) -> StockStatus:
    """
    Decide the warning for a product.

    Simple products (no variants) use their own count. Variable products
    aggregate their active variants: any sold-out option makes the
    product critical, any low option makes it low.
    """
    if not variants:
        return assess_stock(stock_quantity, threshold)

    active = [variant for variant in variants if variant.is_active]
    variant_statuses = []
    for variant in active:
        status = assess_stock(variant.stock_quantity, threshold)
        status.variant_id = variant.id
        variant_statuses.append(status)

    total = sum(status.stock_quantity for status in variant_statuses)
    any_out = any(status.level == StockLevel.OUT_OF_STOCK for status in variant_statuses)
    any_low = any(status.needs_warning for status in variant_statuses)

    if total == 0:
        level, message = StockLevel.OUT_OF_STOCK, MESSAGE_OUT_OF_STOCK
    elif any_out:
        level, message = StockLevel.CRITICAL, MESSAGE_SOME_OPTIONS_OUT
    elif any_low:
        level, message = StockLevel.LOW, MESSAGE_LIMITED_STOCK
    else:
        level, message = StockLevel.NORMAL, ""

    return StockStatus(
        level=level,
        stock_quantity=total,
        needs_warning=any_low or total == 0,
        message=message,
        variants=variant_statuses,
    )
