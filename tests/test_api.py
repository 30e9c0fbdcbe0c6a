"""Tests for the FastAPI surface."""

from conftest import auth


def _add(client, token, variant_id, quantity):
    return client.post("/cart/items", json={"variant_id": variant_id, "quantity": quantity}, headers=auth(token))


def _checkout(client, token, note=None):
    cart = client.get("/cart", headers=auth(token)).json()
    ids = [i["cart_item_id"] for i in cart["items"]]
    return client.post("/orders", json={"cart_item_ids": ids, "note": note}, headers=auth(token))


class TestHealthAndAuth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}

    def test_missing_token(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_malformed_header(self, client):
        response = client.get("/cart", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_unknown_token(self, client):
        response = client.get("/cart", headers=auth("nope"))
        assert response.status_code == 401


class TestCartEndpoints:
    def test_add_view_remove(self, client, catalog):
        response = _add(client, "alice-token", catalog.v, 2)
        assert response.status_code == 200
        data = response.json()
        assert data["account_id"] == catalog.alice.account_id
        assert data["items"][0]["quantity"] == 2
        assert data["items"][0]["product_name"] == "Classic Tee"

        item_id = data["items"][0]["cart_item_id"]
        response = client.delete(f"/cart/items/{item_id}", headers=auth("alice-token"))
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_add_over_stock(self, client, catalog):
        response = _add(client, "alice-token", catalog.w, 6)
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "insufficient_stock"
        assert body["variant_id"] == catalog.w

    def test_add_validates_body(self, client, catalog):
        response = _add(client, "alice-token", catalog.v, 0)
        assert response.status_code == 422

    def test_remove_foreign_item(self, client, catalog):
        item_id = _add(client, "alice-token", catalog.v, 1).json()["items"][0]["cart_item_id"]

        response = client.delete(f"/cart/items/{item_id}", headers=auth("bob-token"))
        assert response.status_code == 404

    def test_preview(self, client, catalog):
        _add(client, "alice-token", catalog.v, 3)
        ids = [i["cart_item_id"] for i in client.get("/cart", headers=auth("alice-token")).json()["items"]]

        response = client.post("/cart/preview", json={"cart_item_ids": ids}, headers=auth("alice-token"))

        assert response.status_code == 200
        data = response.json()
        assert data["total_quantity"] == 3
        assert float(data["subtotal"]) == 750.0
        assert float(data["delivery_fee"]) == 140.0
        assert float(data["total_amount"]) == 890.0
        assert data["lines"][0]["size"] == "M"


class TestOrderEndpoints:
    def test_place_and_read_order(self, client, catalog):
        _add(client, "alice-token", catalog.v, 4)

        response = _checkout(client, "alice-token", note="ring twice")
        assert response.status_code == 201
        created = response.json()
        assert created["status"] == "Pending"
        assert float(created["total_amount"]) == 1160.0

        order_id = created["order_id"]
        detail = client.get(f"/orders/{order_id}", headers=auth("alice-token")).json()
        assert detail["note"] == "ring twice"
        assert detail["items"][0]["quantity"] == 4
        assert float(detail["items"][0]["price_at_purchase"]) == 250.0

        mine = client.get("/orders", headers=auth("alice-token")).json()
        assert [o["id"] for o in mine] == [order_id]
        assert client.get("/cart", headers=auth("alice-token")).json()["items"] == []

    def test_empty_selection(self, client, catalog):
        response = client.post("/orders", json={"cart_item_ids": []}, headers=auth("alice-token"))
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_foreign_cart_item(self, client, catalog):
        item_id = _add(client, "alice-token", catalog.v, 1).json()["items"][0]["cart_item_id"]

        response = client.post("/orders", json={"cart_item_ids": [item_id]}, headers=auth("bob-token"))
        assert response.status_code == 404

    def test_other_customer_cannot_read_order(self, client, catalog):
        _add(client, "alice-token", catalog.v, 1)
        order_id = _checkout(client, "alice-token").json()["order_id"]

        assert client.get(f"/orders/{order_id}", headers=auth("bob-token")).status_code == 403
        assert client.get(f"/orders/{order_id}", headers=auth("staff-token")).status_code == 200

    def test_all_orders_is_staff_only(self, client, catalog):
        _add(client, "alice-token", catalog.v, 1)
        _checkout(client, "alice-token")

        assert client.get("/orders/all", headers=auth("alice-token")).status_code == 403
        response = client.get("/orders/all", headers=auth("staff-token"))
        assert response.status_code == 200
        orders = response.json()
        assert len(orders) == 1
        assert orders[0]["username"] == "alice"
        assert orders[0]["email"] == "alice@example.com"
        item = orders[0]["items"][0]
        assert item["product_name"] == "Classic Tee"
        assert item["size"] == "M"
        assert item["gender"] == "unisex"

    def test_fulfillment_flow(self, client, catalog):
        _add(client, "alice-token", catalog.v, 1)
        order_id = _checkout(client, "alice-token").json()["order_id"]

        response = client.post(f"/orders/{order_id}/prepare", headers=auth("alice-token"))
        assert response.status_code == 403

        response = client.post(f"/orders/{order_id}/prepare", headers=auth("staff-token"))
        assert response.json() == {"order_id": order_id, "status": "Preparing"}

        response = client.post(
            f"/orders/{order_id}/ship",
            json={"tracking_number": "ABC123", "carrier": "DHL"},
            headers=auth("staff-token"),
        )
        assert response.json()["status"] == "Shipped"

        response = client.post(f"/orders/{order_id}/deliver", headers=auth("alice-token"))
        assert response.status_code == 403

        response = client.post(f"/orders/{order_id}/deliver", headers=auth("staff-token"))
        assert response.json()["status"] == "Delivered"

        response = client.post(f"/orders/{order_id}/deliver", headers=auth("staff-token"))
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_duplicate_tracking_conflict(self, client, catalog):
        _add(client, "alice-token", catalog.v, 1)
        first = _checkout(client, "alice-token").json()["order_id"]
        _add(client, "bob-token", catalog.v, 1)
        second = _checkout(client, "bob-token").json()["order_id"]
        body = {"tracking_number": "ABC123", "carrier": "DHL"}

        assert client.post(f"/orders/{first}/ship", json=body, headers=auth("staff-token")).status_code == 200
        response = client.post(f"/orders/{second}/ship", json=body, headers=auth("staff-token"))
        assert response.status_code == 409

    def test_cart_changed_after_preview(self, client, catalog):
        _add(client, "alice-token", catalog.v, 2)
        ids = [i["cart_item_id"] for i in client.get("/cart", headers=auth("alice-token")).json()["items"]]
        preview = client.post("/cart/preview", json={"cart_item_ids": ids}, headers=auth("alice-token")).json()
        assert preview["total_quantity"] == 2

        _add(client, "alice-token", catalog.v, 3)
        response = _checkout(client, "alice-token")

        # POST /orders wycenia od nowa, wiec zamawia aktualne 5 sztuk
        assert response.status_code == 201
        order_id = response.json()["order_id"]
        detail = client.get(f"/orders/{order_id}", headers=auth("alice-token")).json()
        assert detail["items"][0]["quantity"] == 5

    def test_ship_without_tracking(self, client, catalog):
        _add(client, "alice-token", catalog.v, 1)
        order_id = _checkout(client, "alice-token").json()["order_id"]

        response = client.post(f"/orders/{order_id}/ship", json={"carrier": "DHL"}, headers=auth("staff-token"))
        assert response.status_code == 400

    def test_cancel_twice(self, client, catalog):
        _add(client, "alice-token", catalog.v, 2)
        order_id = _checkout(client, "alice-token").json()["order_id"]

        response = client.post(
            f"/orders/{order_id}/cancel", json={"cancel_reason": "wrong size"}, headers=auth("alice-token")
        )
        assert response.json()["status"] == "Cancelled"

        response = client.post(
            f"/orders/{order_id}/cancel", json={"cancel_reason": "again"}, headers=auth("alice-token")
        )
        assert response.status_code == 409

        detail = client.get(f"/orders/{order_id}", headers=auth("alice-token")).json()
        assert detail["cancel_reason"] == "wrong size"

    def test_unknown_order(self, client, catalog):
        response = client.post("/orders/999/prepare", headers=auth("staff-token"))
        assert response.status_code == 404
