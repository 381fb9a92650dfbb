"""HTTP surface: routes, payload aliases and the {reason, message} error body."""

from decimal import Decimal

from helpers import (
    VARIANT_DESK,
    VARIANT_MONITOR,
    VARIANT_MOUSE,
    booking_of,
    status_of_booking,
    stock_of,
)

USER = 7


def add(client, variant_id, qty, user_id=USER):
    return client.post("/cart", json={"cartQty": qty, "variantId": variant_id, "userId": user_id})


def confirm(client, booking_id, user_id=USER, address_id=1):
    return client.put(
        "/booking/confirm-Order",
        json={"bookingID": booking_id, "userId": user_id, "addressId": address_id},
    )


class TestHealth:
    def test_health(self, client):
        res = client.get("/health")

        assert res.status_code == 200
        assert res.json() == {"status": "ok"}

    def test_error_body_is_documented(self, client):
        schema = client.get("/openapi.json").json()

        assert set(schema["components"]["schemas"]["ErrorOut"]["required"]) == {"reason", "message"}
        confirm_order = schema["paths"]["/booking/confirm-Order"]["put"]["responses"]
        assert confirm_order["400"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorOut"
        }


class TestCartApi:
    def test_add_to_cart(self, client):
        res = add(client, VARIANT_DESK, 1)

        assert res.status_code == 201
        body = res.json()
        assert body["variant_id"] == VARIANT_DESK
        assert body["quantity"] == 1
        assert body["status"] == "DRAFT"

    def test_add_duplicate_variant(self, client):
        add(client, VARIANT_DESK, 1)

        res = add(client, VARIANT_DESK, 1)

        assert res.status_code == 400
        assert res.json()["reason"] == "Conflict"

    def test_add_below_minimum(self, client):
        res = add(client, VARIANT_MOUSE, 1)

        assert res.status_code == 400
        assert res.json()["reason"] == "BelowMinimum"

    def test_invalid_payload(self, client):
        res = client.post("/cart", json={"cartQty": 0, "variantId": VARIANT_DESK})

        assert res.status_code == 400
        body = res.json()
        assert body["reason"] == "ValidationError"
        assert "cartQty" in body["message"]
        assert "userId" in body["message"]

    def test_get_cart(self, client, stock):
        stock({VARIANT_DESK: 5})
        add(client, VARIANT_DESK, 2)

        res = client.get(f"/cart/{USER}")

        assert res.status_code == 200
        (item,) = res.json()
        assert item["product_title"] == "Oak Desk"
        assert item["quantity"] == 2
        assert item["stock_qty"] == 5
        assert item["image"] == "/api/gallery/image/desk-oak-1"

    def test_get_empty_cart(self, client):
        res = client.get(f"/cart/{USER}")

        assert res.status_code == 404
        assert res.json() == {"reason": "NotFound", "message": "No cart items found for this user"}

    def test_add_one_and_remove_one(self, client, stock):
        stock({VARIANT_MOUSE: 3})
        line = add(client, VARIANT_MOUSE, 2).json()

        res = client.put("/cart/addOne", json={"cart_id": line["id"]})
        assert res.status_code == 200
        assert res.json()["quantity"] == 3

        res = client.put("/cart/addOne", json={"cart_id": line["id"]})
        assert res.status_code == 400
        assert res.json()["reason"] == "StockExceeded"

        res = client.put("/cart/removeOne", json={"cart_id": line["id"]})
        assert res.json()["quantity"] == 2

        res = client.put("/cart/removeOne", json={"cart_id": line["id"]})
        assert res.status_code == 400
        assert res.json()["reason"] == "BelowMinimum"

    def test_remove_line(self, client):
        line = add(client, VARIANT_DESK, 1).json()

        res = client.request("DELETE", "/cart", json={"cartId": line["id"], "userId": USER})

        assert res.status_code == 200
        assert res.json() == {"cart_id": line["id"], "booking_deleted": True}
        assert booking_of(line["booking_id"]) is None

    def test_remove_line_of_another_user(self, client):
        line = add(client, VARIANT_DESK, 1).json()

        res = client.request("DELETE", "/cart", json={"cartId": line["id"], "userId": USER + 1})

        assert res.status_code == 403
        assert res.json()["reason"] == "Unauthorized"

    def test_buy_now(self, client, scheduler):
        res = client.post(
            "/cart/buy-now",
            json={"cartQty": 1, "variantId": VARIANT_MONITOR, "userId": USER, "amount": "899.00"},
        )

        assert res.status_code == 201
        body = res.json()
        assert body["cart"]["variant_id"] == VARIANT_MONITOR
        assert body["expires_at"]
        assert status_of_booking(body["booking_id"]).value == "PENDING"
        assert [booking_id for booking_id, _ in scheduler.calls] == [body["booking_id"]]

    def test_place_order(self, client):
        desk = add(client, VARIANT_DESK, 1).json()
        mouse = add(client, VARIANT_MOUSE, 2).json()

        res = client.post(
            "/cart/place-order",
            json={"userId": USER, "cartIds": [desk["id"], mouse["id"]], "totalAmount": "298.99"},
        )

        assert res.status_code == 200
        assert res.json() == {"booking_id": desk["booking_id"], "updated_count": 2}
        assert booking_of(desk["booking_id"]).amount == Decimal("298.99")

    def test_place_order_without_lines(self, client):
        res = client.post("/cart/place-order", json={"userId": USER, "cartIds": [], "totalAmount": "1.00"})

        assert res.status_code == 400
        assert res.json()["reason"] == "ValidationError"


class TestBookingApi:
    def test_confirm_order(self, client, stock):
        stock({VARIANT_DESK: 5})
        line = add(client, VARIANT_DESK, 2).json()

        res = confirm(client, line["booking_id"], address_id=9)

        assert res.status_code == 200
        body = res.json()
        assert body["booking"]["status"] == "CONFIRMED"
        assert body["booking"]["address_id"] == 9
        assert [item["status"] for item in body["cart"]] == ["CONFIRMED"]
        assert stock_of(VARIANT_DESK) == 3

    def test_confirm_order_out_of_stock(self, client, stock):
        stock({VARIANT_MONITOR: 1})
        line = add(client, VARIANT_MONITOR, 2).json()

        res = confirm(client, line["booking_id"])

        assert res.status_code == 400
        assert res.json() == {
            "reason": "InsufficientStock",
            "message": f"Insufficient stock for product variant {VARIANT_MONITOR}",
        }
        assert stock_of(VARIANT_MONITOR) == 1

    def test_update_status_with_legacy_code(self, client, stock):
        stock({VARIANT_DESK: 5})
        line = add(client, VARIANT_DESK, 1).json()
        confirm(client, line["booking_id"])

        res = client.put(
            "/booking/update-the-status",
            json={"bookingId": line["booking_id"], "cartId": line["id"], "status": 2.5},
        )

        assert res.status_code == 200
        body = res.json()
        assert body["cart"]["status"] == "PACKED"
        assert body["booking_status"] == "PACKED"
        assert body["booking_updated"] is True

    def test_update_status_rejects_unknown_code(self, client):
        res = client.put(
            "/booking/update-the-status",
            json={"bookingId": 1, "cartId": 1, "status": 2},
        )

        assert res.status_code == 400
        assert res.json()["reason"] == "ValidationError"

    def test_update_status_rejects_cancel(self, client):
        res = client.put(
            "/booking/update-the-status",
            json={"bookingId": 1, "cartId": 1, "status": -1},
        )

        assert res.status_code == 400
        assert res.json()["reason"] == "ValidationError"

    def test_cancel_cart_item(self, client, stock):
        stock({VARIANT_DESK: 5})
        line = add(client, VARIANT_DESK, 2).json()
        confirm(client, line["booking_id"])

        res = client.put(
            "/booking/cancel-cart-item",
            json={"bookingId": line["booking_id"], "cartId": line["id"]},
        )

        assert res.status_code == 200
        body = res.json()
        assert body["cart"]["status"] == "CANCELLED"
        assert body["booking_status"] == "CANCELLED"
        assert stock_of(VARIANT_DESK) == 5

    def test_get_booking(self, client, stock):
        stock({VARIANT_DESK: 5})
        line = add(client, VARIANT_DESK, 1).json()

        res = client.get(f"/booking/{line['booking_id']}", params={"user_id": USER})
        assert res.status_code == 200
        assert [item["id"] for item in res.json()["lines"]] == [line["id"]]

        res = client.get(f"/booking/{line['booking_id']}", params={"user_id": USER + 1})
        assert res.status_code == 403

    def test_order_details(self, client, stock):
        stock({VARIANT_DESK: 5})
        line = add(client, VARIANT_DESK, 1).json()

        res = client.post("/booking/order-details", json={"userId": USER})

        assert res.status_code == 200
        (booking,) = res.json()
        assert booking["id"] == line["booking_id"]
        assert booking["cart_items"][0]["product_title"] == "Oak Desk"

    def test_paginated_orders(self, client, stock):
        stock({VARIANT_DESK: 10})
        for user_id in (1, 2, 3):
            line = add(client, VARIANT_DESK, 1, user_id=user_id).json()
            confirm(client, line["booking_id"], user_id=user_id)

        res = client.get("/booking/get-order-details", params={"page": 2, "limit": 2})

        assert res.status_code == 200
        body = res.json()
        assert len(body["data"]) == 1
        assert body["pagination"] == {
            "current_page": 2,
            "total_pages": 2,
            "total_items": 3,
            "items_per_page": 2,
        }

    def test_paginated_orders_rejects_bad_page(self, client):
        res = client.get("/booking/get-order-details", params={"page": 0})

        assert res.status_code == 400
        assert res.json()["reason"] == "ValidationError"

    def test_delivered_orders_empty(self, client):
        res = client.get("/booking/delivered")

        assert res.status_code == 404
        assert res.json()["reason"] == "NotFound"
