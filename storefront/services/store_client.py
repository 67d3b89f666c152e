"""
Store API Client

HTTP client for the catalog and order endpoints of the store API.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from cart import ProductSnapshot

logger = logging.getLogger(__name__)


class StoreClientError(Exception):
    """Base exception for store API errors"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(StoreClientError):
    """The requested resource does not exist"""
    pass


class StoreClient:
    """
    Client for the store API.

    Usage:
        client = StoreClient("http://localhost:8001")
        product = await client.get_product("premium-smart-watch")
        order = await client.create_order(total=..., tax=..., shipping=...)
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize store client.

        Args:
            base_url: Base URL of the store API
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. to call an ASGI app in-process
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body"""
        try:
            response = await self._http_client.request(
                method=method,
                url=path,
                json=body,
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(f"Request failed: {method} {path} - {e!r}")
            raise StoreClientError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found", status_code=404)

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise StoreClientError(
                f"{method} {path} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise StoreClientError(f"{method} {path} returned invalid JSON") from e

    # ==================== Catalog APIs ====================

    async def get_categories(self) -> list[dict]:
        """List product categories"""
        return await self._request("GET", "/api/categories")

    async def get_category(self, slug: str) -> dict:
        """Get a category by slug"""
        return await self._request("GET", f"/api/categories/{slug}")

    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict]:
        """List products, optionally filtered by category slug or search text"""
        params = {}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return await self._request("GET", "/api/products", params=params or None)

    async def get_product(self, slug: str) -> ProductSnapshot:
        """Get a product snapshot by slug"""
        data = await self._request("GET", f"/api/products/{slug}")
        try:
            return ProductSnapshot.model_validate(data)
        except ValidationError as e:
            raise StoreClientError(f"Product {slug} has an invalid shape: {e}") from e

    # ==================== Order APIs ====================

    async def create_order(
        self,
        total: float,
        tax: float,
        shipping: float,
        status: str = "pending",
        user_id: Optional[int] = None,
    ) -> dict:
        """Create an order header"""
        body = {
            "total": total,
            "tax": tax,
            "shipping": shipping,
            "status": status,
        }
        if user_id is not None:
            body["userId"] = user_id

        return await self._request("POST", "/api/orders", body=body)

    async def add_order_item(
        self,
        order_id: int,
        product_id: int,
        quantity: int,
        price: float,
    ) -> dict:
        """Record an item against an order"""
        return await self._request(
            "POST",
            f"/api/orders/{order_id}/items",
            body={"productId": product_id, "quantity": quantity, "price": price},
        )

    async def get_order(self, order_id: int) -> dict:
        """Get an order with its items"""
        return await self._request("GET", f"/api/orders/{order_id}")

    async def get_user_orders(self, user_id: int) -> list[dict]:
        """List a user's orders"""
        return await self._request("GET", f"/api/users/{user_id}/orders")
