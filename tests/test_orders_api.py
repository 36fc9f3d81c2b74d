"""Tests for the /orders HTTP surface and its error envelope."""

import pytest

from tests.conftest import auth_headers, checkout_payload

CUSTOMER = auth_headers(1, "customer")
OTHER_CUSTOMER = auth_headers(2, "customer")
VENDOR_ONE = auth_headers(100, "vendor")
ADMIN = auth_headers(999, "admin")


@pytest.fixture
def placed(client, catalog):
    response = client.post(
        "/orders",
        json=checkout_payload((catalog["a"].id, 2), (catalog["b"].id, 1)),
        headers=CUSTOMER
    )
    assert response.status_code == 201
    return response.json()["orders"]


class TestCreateOrder:
    def test_creates_one_order_per_vendor(self, client, catalog, publisher):
        response = client.post(
            "/orders",
            json=checkout_payload((catalog["a"].id, 2), (catalog["b"].id, 1)),
            headers=CUSTOMER
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Orders created successfully"
        assert [order["pricing"]["total"] for order in data["orders"]] == [49.19, 108.0]
        assert data["orders"][0]["shippingAddress"]["zipCode"] == "62701"
        assert data["orders"][0]["statusHistory"][0]["status"] == "pending"
        assert len(publisher.of_type("OrderCreated")) == 2

    def test_cookie_token_is_accepted(self, client, catalog):
        client.cookies.set("token", CUSTOMER["Authorization"].split(" ", 1)[1])
        response = client.post("/orders", json=checkout_payload((catalog["a"].id, 1)))
        assert response.status_code == 201

    def test_requires_authentication(self, client, catalog):
        response = client.post("/orders", json=checkout_payload((catalog["a"].id, 1)))
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Not authorized to access this route - no token provided"
        }

    def test_rejects_invalid_token(self, client, catalog):
        response = client.post(
            "/orders",
            json=checkout_payload((catalog["a"].id, 1)),
            headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_empty_cart_fails_validation(self, client, catalog):
        response = client.post("/orders", json=checkout_payload(), headers=CUSTOMER)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert body["errors"]

    def test_missing_address_fields_fail_validation(self, client, catalog):
        payload = checkout_payload((catalog["a"].id, 1))
        del payload["shippingAddress"]["city"]
        response = client.post("/orders", json=payload, headers=CUSTOMER)
        assert response.status_code == 400

    def test_unknown_payment_method(self, client, catalog):
        payload = checkout_payload((catalog["a"].id, 1), payment={"method": "barter"})
        response = client.post("/orders", json=payload, headers=CUSTOMER)
        assert response.status_code == 400

    def test_malformed_contact_email(self, client, catalog):
        payload = checkout_payload((catalog["a"].id, 1))
        payload["shippingAddress"]["email"] = "jane.doe-at-shopmail"
        response = client.post("/orders", json=payload, headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"
        assert response.json()["errors"][0]["loc"][-1] == "email"

    def test_unavailable_quantity(self, client, catalog):
        response = client.post(
            "/orders",
            json=checkout_payload((catalog["a"].id, 1), (catalog["b"].id, 5)),
            headers=CUSTOMER
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Product Product B is not available in requested quantity"
        }

    def test_unknown_product(self, client, catalog):
        response = client.post("/orders", json=checkout_payload((999, 1)), headers=CUSTOMER)
        assert response.status_code == 404
        assert response.json()["message"] == "Product 999 not found"


class TestReadOrders:
    def test_my_orders(self, client, placed):
        response = client.get("/orders/my-orders", headers=CUSTOMER)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["totalPages"] == 1
        assert data["currentPage"] == 1

    def test_my_orders_limit_is_capped(self, client, placed):
        response = client.get("/orders/my-orders?limit=500", headers=CUSTOMER)
        assert response.status_code == 400

    def test_vendor_orders(self, client, placed):
        response = client.get("/orders/vendor-orders", headers=VENDOR_ONE)
        assert response.status_code == 200
        assert [order["id"] for order in response.json()["orders"]] == [placed[0]["id"]]

    def test_vendor_orders_requires_vendor_role(self, client, placed):
        response = client.get("/orders/vendor-orders", headers=CUSTOMER)
        assert response.status_code == 403
        assert response.json()["message"] == "User role customer is not authorized to access this route"

    def test_get_order(self, client, placed):
        response = client.get(f"/orders/{placed[0]['id']}", headers=CUSTOMER)
        assert response.status_code == 200
        assert response.json()["order"]["orderNumber"] == placed[0]["orderNumber"]

    def test_get_order_of_someone_else(self, client, placed):
        response = client.get(f"/orders/{placed[0]['id']}", headers=OTHER_CUSTOMER)
        assert response.status_code == 403

    def test_get_missing_order(self, client, catalog):
        response = client.get("/orders/9999", headers=CUSTOMER)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Order not found"}


class TestUpdateStatus:
    def test_vendor_updates_own_order(self, client, placed, publisher):
        response = client.put(
            f"/orders/{placed[0]['id']}/status",
            json={"status": "shipped", "trackingNumber": "TRK1", "carrier": "DHL"},
            headers=VENDOR_ONE
        )
        assert response.status_code == 200
        order = response.json()["order"]
        assert order["status"] == "shipped"
        assert order["tracking"]["trackingNumber"] == "TRK1"
        assert len(publisher.of_type("OrderStatusChanged")) == 1

    def test_customer_cannot_update(self, client, placed):
        response = client.put(f"/orders/{placed[0]['id']}/status", json={"status": "confirmed"}, headers=CUSTOMER)
        assert response.status_code == 403

    def test_unknown_status(self, client, placed):
        response = client.put(f"/orders/{placed[0]['id']}/status", json={"status": "lost"}, headers=ADMIN)
        assert response.status_code == 400


class TestCancelOrder:
    def test_cancel_restores_stock(self, client, placed, catalog):
        response = client.put(f"/orders/{placed[1]['id']}/cancel", headers=CUSTOMER)
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "cancelled"

        availability = client.get(f"/products/{catalog['b'].id}/availability").json()
        assert availability["quantity"] == 1
        assert availability["available"] is True

    def test_cancel_with_reason(self, client, placed):
        response = client.put(
            f"/orders/{placed[0]['id']}/cancel", json={"reason": "Too slow"}, headers=CUSTOMER
        )
        assert response.json()["order"]["cancellation"]["reason"] == "Too slow"

    def test_cannot_cancel_shipped_order(self, client, placed, catalog):
        client.put(f"/orders/{placed[1]['id']}/status", json={"status": "shipped"}, headers=ADMIN)

        response = client.put(f"/orders/{placed[1]['id']}/cancel", headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Order cannot be cancelled at this stage"}
        assert client.get(f"/products/{catalog['b'].id}/availability").json()["quantity"] == 0


class TestEnvelope:
    def test_unknown_route(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "healthy"
