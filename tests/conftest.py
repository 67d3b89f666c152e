"""
Pytest configuration and fixtures for tests.

The store API runs in-process: the storefront and the checkout orchestrator
reach it through httpx.ASGITransport, so no network is involved.
"""

import asyncio

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from cart import CartEngine, MemoryCartStorage, ProductSnapshot
from store_api.database.catalog import CatalogDatabase
from store_api.database.orders import OrderDatabase
from store_api.main import app as store_app
from store_api.routes import catalog as catalog_routes
from store_api.routes import orders as orders_routes
from storefront.core.session import SessionManager, file_storage_factory
from storefront.main import app as storefront_app
from storefront.routes import deps
from storefront.services.store_client import StoreClient

STORE_BASE_URL = "http://store.test"


@pytest.fixture
def catalog_db(monkeypatch) -> CatalogDatabase:
    """Fresh catalog wired into the store API routes"""
    db = CatalogDatabase()
    monkeypatch.setattr(catalog_routes, "catalog_db", db)
    monkeypatch.setattr(orders_routes, "catalog_db", db)
    return db


@pytest.fixture
def order_db(monkeypatch) -> OrderDatabase:
    """Fresh order store wired into the store API routes"""
    db = OrderDatabase()
    monkeypatch.setattr(orders_routes, "order_db", db)
    return db


@pytest.fixture
def store_api(catalog_db, order_db) -> TestClient:
    """Synchronous client for the store API"""
    return TestClient(store_app)


@pytest_asyncio.fixture
async def store_client(catalog_db, order_db):
    """StoreClient talking to the in-process store API"""
    client = StoreClient(STORE_BASE_URL, transport=httpx.ASGITransport(app=store_app))
    yield client
    await client.close()


@pytest.fixture
def session_manager(tmp_path) -> SessionManager:
    """Session manager with file-backed carts under tmp_path"""
    return SessionManager(file_storage_factory(tmp_path / "carts"))


@pytest.fixture
def storefront(catalog_db, order_db, session_manager):
    """Storefront client wired to the in-process store API"""
    client = StoreClient(STORE_BASE_URL, transport=httpx.ASGITransport(app=store_app))

    storefront_app.dependency_overrides[deps.get_store_client] = lambda: client
    storefront_app.dependency_overrides[deps.get_session_manager] = lambda: session_manager

    with TestClient(storefront_app) as test_client:
        yield test_client

    storefront_app.dependency_overrides.clear()
    asyncio.run(client.close())


@pytest.fixture
def make_product():
    """Factory for product snapshots"""

    def _make(product_id: int = 1, price: float = 10.0, **kwargs) -> ProductSnapshot:
        fields = {"name": f"Product {product_id}", "slug": f"product-{product_id}"}
        fields.update(kwargs)
        return ProductSnapshot(id=product_id, price=price, **fields)

    return _make


@pytest.fixture
def storage() -> MemoryCartStorage:
    return MemoryCartStorage()


@pytest.fixture
def engine(storage) -> CartEngine:
    """Empty cart engine backed by in-memory storage"""
    return CartEngine(storage=storage)
