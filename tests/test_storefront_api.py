"""
Component Tests: storefront API

Drives the storefront through TestClient with the store API served
in-process, covering the cart lifecycle, checkout and order tracking.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from storefront.core.session import SessionManager, file_storage_factory
from storefront.main import app as storefront_app
from storefront.routes import deps
from storefront.services.store_client import StoreClient

HEADPHONES = "wireless-noise-cancelling-headphones"
WATCH = "premium-smart-watch"


def _new_cart(storefront) -> str:
    response = storefront.post("/api/cart")
    assert response.status_code == 201
    return response.json()["sessionId"]


def _add(storefront, session_id, slug, quantity=1):
    return storefront.post(
        f"/api/cart/{session_id}/items",
        json={"slug": slug, "quantity": quantity},
    )


def _override_store(handler) -> StoreClient:
    client = StoreClient("http://store.test", transport=httpx.MockTransport(handler))
    storefront_app.dependency_overrides[deps.get_store_client] = lambda: client
    return client


class TestHealth:

    def test_health(self, storefront):
        body = storefront.get("/health").json()

        assert body["status"] == "healthy"
        assert body["service"] == "storefront"


class TestCart:

    def test_new_cart_is_empty(self, storefront):
        response = storefront.post("/api/cart")

        body = response.json()
        assert uuid.UUID(body["sessionId"])
        assert body["itemCount"] == 0
        assert body["cart"]["items"] == []
        assert body["display"]["formattedTotal"] == "$0.00"

    def test_add_item(self, storefront):
        session_id = _new_cart(storefront)

        response = _add(storefront, session_id, WATCH, 2)

        assert response.status_code == 200
        body = response.json()
        assert body["itemCount"] == 2
        item = body["cart"]["items"][0]
        assert item["productId"] == 2
        assert item["product"]["price"] == 299.99
        assert body["cart"]["subtotal"] == pytest.approx(599.98)
        assert body["message"] == "Premium Smart Watch has been added to your cart."

    def test_display_totals_are_rounded(self, storefront):
        session_id = _new_cart(storefront)

        body = _add(storefront, session_id, WATCH, 2).json()

        assert body["display"]["tax"] == 48.0
        assert body["display"]["total"] == 647.98
        assert body["display"]["formattedTotal"] == "$647.98"

    def test_adding_twice_merges(self, storefront):
        session_id = _new_cart(storefront)

        _add(storefront, session_id, HEADPHONES, 2)
        body = _add(storefront, session_id, HEADPHONES, 3).json()

        assert len(body["cart"]["items"]) == 1
        assert body["cart"]["items"][0]["quantity"] == 5

    def test_get_cart(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)

        body = storefront.get(f"/api/cart/{session_id}").json()

        assert body["itemCount"] == 1
        assert body["message"] is None

    def test_unknown_product(self, storefront):
        session_id = _new_cart(storefront)

        response = _add(storefront, session_id, "flying-car")

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    def test_out_of_stock_product_is_refused(self, storefront, catalog_db):
        catalog_db.products[1] = catalog_db.products[1].model_copy(update={"in_stock": False})
        session_id = _new_cart(storefront)

        response = _add(storefront, session_id, HEADPHONES)

        assert response.status_code == 409
        assert "out of stock" in response.json()["detail"]
        assert storefront.get(f"/api/cart/{session_id}").json()["itemCount"] == 0

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_add_rejects_non_positive_quantity(self, storefront, quantity):
        session_id = _new_cart(storefront)

        response = _add(storefront, session_id, WATCH, quantity)

        assert response.status_code == 422
        assert storefront.get(f"/api/cart/{session_id}").json()["itemCount"] == 0

    def test_add_rejects_fractional_quantity(self, storefront):
        session_id = _new_cart(storefront)

        response = _add(storefront, session_id, WATCH, 1.5)

        assert response.status_code == 422

    def test_catalog_outage_is_bad_gateway(self, storefront):
        session_id = _new_cart(storefront)

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        _override_store(handler)
        response = _add(storefront, session_id, WATCH)

        assert response.status_code == 502

    def test_update_quantity(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)

        response = storefront.put(f"/api/cart/{session_id}/items/2", json={"quantity": 4})

        assert response.status_code == 200
        assert response.json()["itemCount"] == 4

    def test_update_to_zero_removes(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)
        _add(storefront, session_id, HEADPHONES)

        body = storefront.put(f"/api/cart/{session_id}/items/2", json={"quantity": 0}).json()

        assert [i["productId"] for i in body["cart"]["items"]] == [1]

    def test_remove_item(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)

        response = storefront.delete(f"/api/cart/{session_id}/items/2")

        assert response.status_code == 200
        assert response.json()["itemCount"] == 0
        assert response.json()["message"] == "Premium Smart Watch has been removed from your cart."

    def test_remove_absent_item(self, storefront):
        session_id = _new_cart(storefront)

        response = storefront.delete(f"/api/cart/{session_id}/items/99")

        assert response.status_code == 200
        assert response.json()["message"] is None

    def test_clear_cart(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)
        _add(storefront, session_id, HEADPHONES)

        body = storefront.delete(f"/api/cart/{session_id}").json()

        assert body["itemCount"] == 0
        assert body["cart"]["total"] == 0

    @pytest.mark.parametrize("session_id", ["not-a-session", "CART", str(uuid.uuid4())])
    def test_unknown_session(self, storefront, session_id):
        response = storefront.get(f"/api/cart/{session_id}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found"


class TestSessions:

    def test_cart_survives_restart(self, storefront, tmp_path):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH, 2)
        _add(storefront, session_id, HEADPHONES)

        restarted = SessionManager(file_storage_factory(tmp_path / "carts"))
        storefront_app.dependency_overrides[deps.get_session_manager] = lambda: restarted

        body = storefront.get(f"/api/cart/{session_id}").json()

        assert [(i["productId"], i["quantity"]) for i in body["cart"]["items"]] == [(2, 2), (1, 1)]
        assert body["cart"]["total"] == pytest.approx((2 * 299.99 + 149.99) * 1.08)

    @pytest.mark.asyncio
    async def test_get_or_create_session(self, session_manager):
        created = await session_manager.get_or_create_session()
        again = await session_manager.get_or_create_session(created.session_id)
        fresh = await session_manager.get_or_create_session("unknown")

        assert again is created
        assert fresh.session_id != created.session_id

    @pytest.mark.asyncio
    async def test_cleanup_old_sessions(self, session_manager):
        stale = await session_manager.create_session()
        active = await session_manager.create_session()
        stale.updated_at = datetime.now(timezone.utc) - timedelta(hours=30)

        removed = session_manager.cleanup_old_sessions(max_age_hours=24)

        assert removed == 1
        assert stale.session_id not in session_manager.sessions
        assert active.session_id in session_manager.sessions

    @pytest.mark.asyncio
    async def test_evicted_session_is_restored_from_storage(self, session_manager, make_product):
        session = await session_manager.create_session()
        await session.cart.add_item(make_product(1, price=10.0), 3)

        assert session_manager.delete_session(session.session_id) is True
        restored = await session_manager.get_session(session.session_id)

        assert restored is not session
        assert restored.cart.item_count == 3

    @pytest.mark.asyncio
    async def test_session_without_saved_cart_is_not_restored(self, session_manager):
        session = await session_manager.create_session()
        session_manager.delete_session(session.session_id)

        assert await session_manager.get_session(session.session_id) is None


class TestCatalog:

    def test_list_products(self, storefront):
        products = storefront.get("/api/catalog/products", params={"category": "fashion"}).json()

        assert [p["slug"] for p in products] == ["laptop-backpack", "designer-sunglasses"]

    def test_list_categories(self, storefront):
        categories = storefront.get("/api/catalog/categories").json()

        assert len(categories) == 4

    def test_get_product_snapshot(self, storefront):
        response = storefront.get("/api/catalog/products/fitness-tracker-band")

        assert response.status_code == 200
        assert response.json() == {
            "id": 3,
            "name": "Fitness Tracker Band",
            "slug": "fitness-tracker-band",
            "price": 89.99,
            "comparePrice": 129.99,
            "inStock": True,
        }

    def test_unknown_category(self, storefront):
        response = storefront.get("/api/catalog/categories/garden")

        assert response.status_code == 404
        assert response.json()["detail"] == "Category not found"

    def test_store_error_is_bad_gateway(self, storefront):
        _override_store(lambda request: httpx.Response(500, json={"detail": "down"}))

        response = storefront.get("/api/catalog/products")

        assert response.status_code == 502


class TestCheckout:

    def test_checkout_places_order(self, storefront, order_db):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH, 2)
        _add(storefront, session_id, HEADPHONES)
        cart = storefront.get(f"/api/cart/{session_id}").json()["cart"]

        response = storefront.post(f"/api/checkout/{session_id}", json={"userId": 3})

        assert response.status_code == 201
        body = response.json()
        order_id = body["orderId"]
        assert body["message"] == f"Order #{order_id} has been created."
        assert len(body["items"]) == 2

        order = order_db.get_order(order_id)
        assert order.total == cart["total"]
        assert order.tax == cart["tax"]
        assert order.user_id == 3

        assert storefront.get(f"/api/cart/{session_id}").json()["itemCount"] == 0

    def test_checkout_with_shipping_address(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)

        response = storefront.post(
            f"/api/checkout/{session_id}",
            json={
                "shippingAddress": {
                    "name": "A. Buyer",
                    "street": "1 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "postalCode": "62701",
                },
            },
        )

        assert response.status_code == 201

    def test_empty_cart(self, storefront, order_db):
        session_id = _new_cart(storefront)

        response = storefront.post(f"/api/checkout/{session_id}", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Your cart is empty"
        assert order_db.orders == {}

    def test_unknown_session(self, storefront):
        response = storefront.post(f"/api/checkout/{uuid.uuid4()}", json={})

        assert response.status_code == 404

    def test_order_creation_failure_keeps_cart(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH, 2)

        _override_store(lambda request: httpx.Response(503, json={"detail": "down"}))
        response = storefront.post(f"/api/checkout/{session_id}", json={})

        assert response.status_code == 502
        assert response.json()["detail"] == "There was a problem placing your order. Please try again."
        assert storefront.get(f"/api/cart/{session_id}").json()["itemCount"] == 2

    def test_partial_failure_reports_order(self, storefront, catalog_db, order_db):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, HEADPHONES)
        _add(storefront, session_id, WATCH)
        del catalog_db.products[2]

        response = storefront.post(f"/api/checkout/{session_id}", json={})

        assert response.status_code == 502
        detail = response.json()["detail"]
        order_id = detail["orderId"]
        assert [i["productId"] for i in detail["failedItems"]] == [2]
        assert [i.product_id for i in order_db.get_order_items(order_id)] == [1]
        assert storefront.get(f"/api/cart/{session_id}").json()["itemCount"] == 2

    def test_track_order(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)
        order_id = storefront.post(f"/api/checkout/{session_id}", json={}).json()["orderId"]

        response = storefront.get(f"/api/checkout/orders/{order_id}")

        assert response.status_code == 200
        order = response.json()
        assert order["id"] == order_id
        assert order["status"] == "pending"
        assert [(i["productId"], i["price"]) for i in order["items"]] == [(2, 299.99)]

    def test_track_unknown_order(self, storefront):
        response = storefront.get("/api/checkout/orders/999")

        assert response.status_code == 404

    def test_user_order_history(self, storefront):
        for _ in range(2):
            session_id = _new_cart(storefront)
            _add(storefront, session_id, WATCH)
            storefront.post(f"/api/checkout/{session_id}", json={"userId": 11})

        orders = storefront.get("/api/checkout/users/11/orders").json()

        assert len(orders) == 2
        assert all(o["userId"] == 11 for o in orders)

    def test_session_remembers_user_and_orders(self, storefront, session_manager):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)

        order_id = storefront.post(f"/api/checkout/{session_id}", json={"userId": 4}).json()["orderId"]

        session = session_manager.sessions[session_id]
        assert session.user_id == 4
        assert session.order_ids == [order_id]

    def test_session_user_takes_precedence(self, storefront, order_db):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)
        storefront.post(f"/api/checkout/{session_id}", json={"userId": 4})

        _add(storefront, session_id, HEADPHONES)
        response = storefront.post(f"/api/checkout/{session_id}", json={"userId": 99})

        assert response.status_code == 201
        assert order_db.get_order(response.json()["orderId"]).user_id == 4
        assert storefront.get("/api/checkout/users/99/orders").json() == []

    def test_checkout_already_running_is_conflict(self, storefront, session_manager, order_db):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)
        lock = session_manager.sessions[session_id].cart.checkout_lock
        asyncio.run(lock.acquire())

        try:
            response = storefront.post(f"/api/checkout/{session_id}", json={})
        finally:
            lock.release()

        assert response.status_code == 409
        assert order_db.orders == {}
        assert storefront.get(f"/api/cart/{session_id}").json()["itemCount"] == 1

    def test_incomplete_order_is_listed(self, storefront, catalog_db):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, HEADPHONES)
        _add(storefront, session_id, WATCH)
        del catalog_db.products[2]

        order_id = storefront.post(f"/api/checkout/{session_id}", json={}).json()["detail"]["orderId"]
        response = storefront.get(f"/api/checkout/{session_id}/incomplete")

        assert response.status_code == 200
        [incomplete] = response.json()
        assert incomplete["orderId"] == order_id
        assert incomplete["failedProductIds"] == [2]
        assert incomplete["recordedProductIds"] == [1]
        assert "createdAt" in incomplete

    def test_no_incomplete_orders_after_success(self, storefront):
        session_id = _new_cart(storefront)
        _add(storefront, session_id, WATCH)
        storefront.post(f"/api/checkout/{session_id}", json={})

        assert storefront.get(f"/api/checkout/{session_id}/incomplete").json() == []

    def test_incomplete_orders_for_unknown_session(self, storefront):
        response = storefront.get(f"/api/checkout/{uuid.uuid4()}/incomplete")

        assert response.status_code == 404
