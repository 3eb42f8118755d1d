"""Integration tests for the Marketplace API endpoints via TestClient."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import (
    cart_router,
    catalog_admin_router,
    catalog_router,
    order_admin_router,
    order_router,
    register_marketplace_exception_handlers,
)
from marketplace.catalog.item import CatalogItem
from marketplace.order.order import Order
from protean import current_domain
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(catalog_router)
    app.include_router(catalog_admin_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(order_admin_router)
    register_exception_handlers(app)
    register_marketplace_exception_handlers(app)
    return TestClient(app, follow_redirects=False)


def _create_item(client, name="Kain Ihram", price=150000, stock=10, category="equipment"):
    response = client.post(
        "/admin/marketplace/items",
        json={"name": name, "price": price, "stock": stock, "category": category},
    )
    assert response.status_code == 201
    return response.json()["item_id"]


def _checkout(client, items, owner_id="jamaah-001"):
    response = client.post("/marketplace/checkout", json={"owner_id": owner_id, "items": items})
    assert response.status_code == 200
    return response.json()


def _submit(client, checkout_id, proof, owner_id="jamaah-001", notes=""):
    files = {"payment_proof": ("bukti.jpg", proof, "image/jpeg")} if proof is not None else None
    return client.post(
        "/marketplace/orders",
        data={
            "checkout_id": checkout_id,
            "owner_id": owner_id,
            "owner_email": "siti@example.com",
            "owner_name": "Siti Aminah",
            "phone_number": "08123456789",
            "delivery_address": "Hotel Hilton Makkah, kamar 1203",
            "notes": notes,
        },
        files=files,
    )


class TestCatalogEndpoints:
    def test_create_and_list_items(self, client):
        _create_item(client, name="Kain Ihram")
        _create_item(client, name="Kurma Ajwa", category="food")

        response = client.get("/marketplace/items", params={"category": "food"})

        assert response.status_code == 200
        assert [item["name"] for item in response.json()["items"]] == ["Kurma Ajwa"]

    def test_inactive_items_are_hidden(self, client):
        item_id = _create_item(client)
        response = client.put(f"/admin/marketplace/items/{item_id}/status", json={"status": "inactive"})
        assert response.status_code == 200

        assert client.get("/marketplace/items").json()["items"] == []

    def test_update_item(self, client):
        item_id = _create_item(client)
        response = client.put(f"/admin/marketplace/items/{item_id}", json={"stock": 2})
        assert response.status_code == 200
        assert client.get(f"/marketplace/items/{item_id}").json()["stock"] == 2

    def test_invalid_category_is_400(self, client):
        response = client.post(
            "/admin/marketplace/items",
            json={"name": "Laptop", "price": 1, "stock": 1, "category": "electronics"},
        )
        assert response.status_code == 400

    def test_unknown_item_is_404(self, client):
        assert client.get("/marketplace/items/does-not-exist").status_code == 404

    def test_upload_item_photo(self, client, make_image):
        item_id = _create_item(client)
        response = client.post(
            f"/admin/marketplace/items/{item_id}/image",
            files={"image": ("photo.png", make_image(1000, 800, fmt="PNG"), "image/png")},
        )

        assert response.status_code == 200
        item = current_domain.repository_for(CatalogItem).get(item_id)
        assert item.image.startswith("data:image/jpeg;base64,")

    def test_photo_of_unsupported_type_is_400(self, client, make_image):
        item_id = _create_item(client)
        response = client.post(
            f"/admin/marketplace/items/{item_id}/image",
            files={"image": ("anim.gif", make_image(fmt="GIF", mode="P", color=1), "image/gif")},
        )
        assert response.status_code == 400

    def test_delete_item(self, client):
        item_id = _create_item(client)
        assert client.delete(f"/admin/marketplace/items/{item_id}").status_code == 200
        assert client.get(f"/marketplace/items/{item_id}").status_code == 404


class TestCartEndpoints:
    def test_quote_totals(self, client):
        ihram = _create_item(client, price=150000)
        zamzam = _create_item(client, name="Air Zamzam 5L", price=50000, category="food")

        response = client.post("/marketplace/cart/quote", json={"items": {ihram: 2, zamzam: 1}})

        body = response.json()
        assert response.status_code == 200
        assert body["total_amount"] == 350000
        assert body["total_item_count"] == 3
        assert body["adjustments"] == []

    def test_quote_clamps_to_stock(self, client):
        item_id = _create_item(client, stock=1)

        body = client.post("/marketplace/cart/quote", json={"items": {item_id: 2}}).json()

        assert body["lines"][0]["quantity"] == 1
        assert body["lines"][0]["can_add"] is False
        assert body["adjustments"][0]["reason"] == "exceeds_stock"

    def test_checkout_of_empty_cart_redirects_to_cart(self, client):
        response = client.post("/marketplace/checkout", json={"items": {}})
        assert response.status_code == 303
        assert response.headers["location"] == "/marketplace/cart"

    def test_checkout_returns_payload(self, client):
        item_id = _create_item(client, price=150000)

        body = _checkout(client, {item_id: 2})

        assert body["checkout_id"]
        assert body["checkout"]["totalAmount"] == 300000
        assert body["checkout"]["items"][0]["itemName"] == "Kain Ihram"
        assert body["checkout"]["items"][0]["subtotal"] == 300000


class TestOrderEndpoints:
    def test_submit_order_end_to_end(self, client, make_image):
        ihram = _create_item(client, price=150000)
        zamzam = _create_item(client, name="Air Zamzam 5L", price=50000, category="food")
        checkout = _checkout(client, {ihram: 2, zamzam: 1})

        response = _submit(client, checkout["checkout_id"], make_image(2400, 1800), notes="Antar ke lobby")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["total_amount"] == 350000
        assert body["order_number"].startswith("MPO-")

        document = client.get(f"/marketplace/orders/{body['order_id']}").json()
        assert document["totalAmount"] == 350000
        assert document["status"] == "pending"
        assert document["deliveryAddress"] == "Hotel Hilton Makkah, kamar 1203"
        assert sorted(line["subtotal"] for line in document["items"]) == [50000, 300000]
        assert set(document["items"][0]) == {"itemId", "itemName", "image", "price", "quantity", "subtotal"}
        assert document["paymentProofUrl"].startswith("data:image/jpeg;base64,")

    def test_checkout_is_single_use(self, client, make_image):
        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})
        assert _submit(client, checkout["checkout_id"], make_image()).status_code == 201

        response = _submit(client, checkout["checkout_id"], make_image())

        assert response.status_code == 303
        assert response.headers["location"] == "/marketplace"

    def test_submit_without_checkout_redirects_to_marketplace(self, client, make_image):
        response = _submit(client, "", make_image())
        assert response.status_code == 303
        assert response.headers["location"] == "/marketplace"

    def test_submit_without_proof_is_400_and_keeps_checkout(self, client, make_image):
        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})

        assert _submit(client, checkout["checkout_id"], None).status_code == 400
        assert current_domain.repository_for(Order).find_by_status() == []

        assert _submit(client, checkout["checkout_id"], make_image()).status_code == 201

    def test_expired_checkout_redirects_to_marketplace(self, client, make_image, monkeypatch):
        from marketplace.checkout import transition

        now = [1000.0]
        handoffs = transition.CheckoutHandoffs(ttl_seconds=60, clock=lambda: now[0])
        monkeypatch.setattr(transition, "_current_handoffs", handoffs)
        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})

        now[0] += 120
        response = _submit(client, checkout["checkout_id"], make_image())

        assert response.status_code == 303
        assert response.headers["location"] == "/marketplace"
        assert len(handoffs) == 0
        assert current_domain.repository_for(Order).find_by_status() == []

    def test_oversized_proof_is_400_and_keeps_checkout(self, client, make_image):
        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})

        response = _submit(client, checkout["checkout_id"], b"\xff" * (12 * 1024 * 1024))

        assert response.status_code == 400
        assert current_domain.repository_for(Order).find_by_status() == []
        assert _submit(client, checkout["checkout_id"], make_image()).status_code == 201

    def test_proof_is_processed_off_the_event_loop(self, client, make_image):
        from fastapi.concurrency import run_in_threadpool
        from marketplace.order.submission import submit_order

        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})

        with patch("marketplace.api.routes.run_in_threadpool", new=AsyncMock(wraps=run_in_threadpool)) as offload:
            response = _submit(client, checkout["checkout_id"], make_image())

        assert response.status_code == 201
        assert offload.await_args.args[0] is submit_order

    def test_persistence_failure_is_503(self, client, make_image, monkeypatch):
        from marketplace.order import submission

        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})

        class _Unavailable:
            def process(self, command, asynchronous=False):
                raise ConnectionError("datastore unavailable")

        monkeypatch.setattr(submission, "current_domain", _Unavailable())
        response = _submit(client, checkout["checkout_id"], make_image())

        assert response.status_code == 503
        assert "datastore" not in response.text

    def test_order_history(self, client, make_image):
        item_id = _create_item(client)
        for owner in ("jamaah-001", "jamaah-002"):
            checkout = _checkout(client, {item_id: 1}, owner_id=owner)
            _submit(client, checkout["checkout_id"], make_image(), owner_id=owner)

        orders = client.get("/marketplace/orders", params={"owner_id": "jamaah-001"}).json()["orders"]

        assert len(orders) == 1
        assert orders[0]["userId"] == "jamaah-001"


class TestAdminOrderEndpoints:
    @pytest.fixture()
    def order_id(self, client, make_image):
        item_id = _create_item(client)
        checkout = _checkout(client, {item_id: 1})
        return _submit(client, checkout["checkout_id"], make_image()).json()["order_id"]

    def test_pending_listing_and_count(self, client, order_id):
        listing = client.get("/admin/marketplace/orders", params={"status": "pending"}).json()["orders"]

        assert [order["id"] for order in listing] == [order_id]
        assert client.get("/admin/marketplace/orders/pending/count").json() == {"count": 1}

    def test_approve(self, client, order_id):
        response = client.put(
            f"/admin/marketplace/orders/{order_id}/approve",
            json={"reviewer_id": "admin-01", "reviewer_name": "Admin Travel"},
        )

        assert response.status_code == 200
        document = client.get(f"/marketplace/orders/{order_id}").json()
        assert document["status"] == "approved"
        assert document["reviewedByName"] == "Admin Travel"
        assert client.get("/admin/marketplace/orders/pending/count").json() == {"count": 0}

    def test_reject_requires_notes(self, client, order_id):
        response = client.put(f"/admin/marketplace/orders/{order_id}/reject", json={"reviewer_id": "admin-01"})
        assert response.status_code == 400

    def test_terminal_status_cannot_change(self, client, order_id):
        client.put(
            f"/admin/marketplace/orders/{order_id}/reject",
            json={"reviewer_id": "admin-01", "admin_notes": "Bukti tidak terbaca"},
        )

        response = client.put(f"/admin/marketplace/orders/{order_id}/approve", json={"reviewer_id": "admin-01"})

        assert response.status_code == 400
        assert client.get(f"/marketplace/orders/{order_id}").json()["status"] == "rejected"
