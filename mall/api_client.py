"""
Storefront API client - remote cart endpoints.

Thin async wrapper over the storefront REST API. The cart core never
calls it; UI code uses it to talk to the server-side cart and to fetch
the product data it turns into ``CartItem`` lines.
"""

import os
from decimal import Decimal
from typing import Any, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field, ValidationError

from mall.cart.models import CartItem, make_cart_item
from mall.errors import (
    ApiError,
    ERROR_API_INVALID_RESPONSE,
    ERROR_API_UNREACHABLE,
)
from mall.logging import get_logger, sanitize_id_for_logging
from mall.stock import StockLevel, StockStatus, VariantStock, assess_product_stock, assess_stock

logger = get_logger(__name__)

MALL_API_URL = os.environ.get("MALL_API_URL", "http://localhost:8000/api/v1")
MALL_API_TIMEOUT = float(os.environ.get("MALL_API_TIMEOUT", "10"))

# User-facing messages by status code
STATUS_MESSAGES = {
    401: "لطفاً مجدداً وارد شوید",
    403: "دسترسی غیرمجاز",
    404: "یافت نشد",
}
SERVER_ERROR_MESSAGE = "خطای سرور. لطفاً بعداً تلاش کنید"
UNEXPECTED_ERROR_MESSAGE = "خطای غیرمنتظره"


# ============================================================
# Response models
# ============================================================

class RemoteProduct(BaseModel):
    id: str
    name: str
    name_fa: str = ""
    featured_image: Optional[str] = None
    in_stock: bool = True


class RemoteVariant(BaseModel):
    id: str
    sku: str = ""
    price: Optional[Decimal] = None
    stock_quantity: int = 0
    image: Optional[str] = None
    attribute_summary: str = ""


class RemoteCartItem(BaseModel):
    """Cart line as returned by the server."""
    id: str
    product: RemoteProduct
    product_variant: Optional[RemoteVariant] = None
    quantity: int = Field(ge=0)
    unit_price: Decimal
    total_price: Decimal = Decimal("0")

    def to_cart_item(self) -> CartItem:
        """Build the local cart line; the variant stock becomes the ceiling."""
        variant = self.product_variant
        attributes = {}
        if variant and variant.attribute_summary:
            attributes["summary"] = variant.attribute_summary

        return make_cart_item(
            product_id=self.product.id,
            name=self.product.name,
            unit_price=self.unit_price,
            quantity=self.quantity,
            variant_id=variant.id if variant else None,
            max_quantity=variant.stock_quantity if variant else None,
            name_fa=self.product.name_fa or None,
            image_url=(variant.image if variant and variant.image else self.product.featured_image),
            sku=variant.sku if variant and variant.sku else None,
            attributes=attributes,
        )


class RemoteCart(BaseModel):
    id: str
    items: List[RemoteCartItem] = Field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    total_items: int = 0

    def to_cart_items(self) -> List[CartItem]:
        return [item.to_cart_item() for item in self.items if item.quantity > 0]


# ============================================================
# Client
# ============================================================

class MallApiClient:
    """
    Async client for the storefront REST API.

    Usage:
        async with MallApiClient(token=token) as api:
            cart = await api.get_cart()
            await store.dispatch(LoadItems(cart.to_cart_items()))
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or MALL_API_URL).rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else MALL_API_TIMEOUT
        self._transport = transport

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "MallApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def set_token(self, token: str | None) -> None:
        self.token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Token {self.token}"
        return headers

    async def _request(self, method: str, endpoint: str, payload: dict | None = None) -> Any:
        client = await self._get_http_client()
        try:
            response = await client.request(method, endpoint, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.warning(
                "%s %s failed with %s: %s", method, endpoint, e.response.status_code, message
            )
            if e.response.status_code == 401:
                self.token = None
            raise ApiError(message, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"{ERROR_API_UNREACHABLE}: {e!s}")
            raise ApiError(f"{ERROR_API_UNREACHABLE}: {e!s}") from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(ERROR_API_INVALID_RESPONSE, status_code=response.status_code) from e

    # Cart endpoints

    async def get_cart(self) -> RemoteCart:
        data = await self._request("GET", "/cart/")
        return _parse(RemoteCart, data)

    async def add_to_cart(
        self, product_id: str, variant_id: str | None = None, quantity: int = 1
    ) -> RemoteCartItem:
        data = await self._request(
            "POST",
            "/cart/add/",
            {"product": product_id, "product_variant": variant_id, "quantity": quantity},
        )
        logger.info(
            "Added product %s x%d to remote cart", sanitize_id_for_logging(product_id), quantity
        )
        return _parse(RemoteCartItem, data)

    async def update_cart_item(self, item_id: str, quantity: int) -> RemoteCartItem:
        data = await self._request("PATCH", f"/cart/items/{item_id}/", {"quantity": quantity})
        return _parse(RemoteCartItem, data)

    async def remove_from_cart(self, item_id: str) -> None:
        await self._request("DELETE", f"/cart/items/{item_id}/")

    async def clear_cart(self) -> None:
        await self._request("DELETE", "/cart/clear/")

    # Stock

    async def get_stock_status(
        self,
        product_id: str,
        stock_quantity: int = 0,
        variants: Sequence[VariantStock] | None = None,
    ) -> StockStatus:
        """
        Stock warning for a product from the server.

        Falls back to the local decision over the given counts when the
        endpoint fails or returns something unusable.
        """
        try:
            data = await self._request("GET", f"/products/{product_id}/stock-warning/")
            return _parse_stock_status(data)
        except ApiError as e:
            logger.warning(
                "Stock status for %s unavailable, using local counts: %s",
                sanitize_id_for_logging(product_id),
                e,
            )
            return assess_product_stock(stock_quantity, variants)


def _error_message(response: httpx.Response) -> str:
    """Pick the user-facing message for a failed response."""
    status = response.status_code
    if status in STATUS_MESSAGES:
        return STATUS_MESSAGES[status]
    if status >= 500:
        return SERVER_ERROR_MESSAGE

    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or f"خطای {status}"

    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        if data.get("detail"):
            return str(data["detail"])
        errors = data.get("errors")
        if isinstance(errors, dict):
            flat = []
            for value in errors.values():
                flat.extend(value if isinstance(value, list) else [value])
            if flat:
                return ", ".join(str(v) for v in flat)
    return UNEXPECTED_ERROR_MESSAGE


def _parse(model: type[BaseModel], data: Any):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{ERROR_API_INVALID_RESPONSE} for {model.__name__}: {e}")
        raise ApiError(ERROR_API_INVALID_RESPONSE) from e


def _parse_stock_status(data: Any) -> StockStatus:
    if not isinstance(data, dict):
        raise ApiError(ERROR_API_INVALID_RESPONSE)
    try:
        return StockStatus(
            level=StockLevel(data["level"]),
            stock_quantity=int(data.get("stock_quantity", 0)),
            needs_warning=bool(data.get("needs_warning", False)),
            message=data.get("warning_message") or "",
            variants=[_parse_variant_status(v) for v in data.get("variants") or []],
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise ApiError(f"{ERROR_API_INVALID_RESPONSE}: {e}") from e


def _parse_variant_status(data: dict) -> StockStatus:
    # Variant entries carry no level; derive it from the count
    status = assess_stock(int(data.get("stock_quantity", 0)))
    status.variant_id = data.get("variant_id")
    status.needs_warning = bool(data.get("needs_warning", status.needs_warning))
    status.message = data.get("warning_message") or status.message
    return status
