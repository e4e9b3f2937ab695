"""Integration tests for Order endpoints via TestClient."""

from datetime import timedelta

import pytest
from protean.utils.globals import current_domain

from ordering.order.order import Order

OWNER = {"X-Customer-Id": "cust-001"}


def _create_order(client, delivery_payload, headers=None, **overrides):
    body = {
        "lines": [{"product_id": "prod-A", "quantity": 2}],
        "delivery": delivery_payload,
        "payment": {"method": "cod"},
    }
    body.update(overrides)
    return client.post("/orders", json=body, headers=headers or {})


def _deliver(client, order_id):
    response = client.put(
        f"/admin/orders/{order_id}",
        json={"order_status": "delivered", "delivery_status": "delivered"},
    )
    assert response.status_code == 200
    return response.json()


class TestCreateOrderEndpoint:
    def test_create_order(self, client, delivery_payload):
        response = _create_order(client, delivery_payload)
        assert response.status_code == 201
        data = response.json()
        assert data["order_id"].startswith("ord_")
        assert data["order_status"] == "created"
        assert data["payment_status"] == "pending"
        assert data["total"] == 2000.0
        assert data["delivery"]["postal_code"] == "400703"

    def test_create_order_with_coupon(self, client, delivery_payload):
        client.post(
            "/admin/coupons",
            json={"code": "SAVE10", "discount_type": "percentage", "value": 10},
        )
        data = _create_order(client, delivery_payload, coupon_code="save10").json()
        assert (data["subtotal"], data["discount_amount"], data["total"]) == (2000.0, 200.0, 1800.0)
        assert data["coupon_code"] == "SAVE10"

    def test_expired_coupon_is_ignored(self, client, delivery_payload):
        client.post(
            "/admin/coupons",
            json={
                "code": "GONE",
                "discount_type": "percentage",
                "value": 10,
                "ends_at": "2020-01-01T00:00:00Z",
            },
        )
        data = _create_order(client, delivery_payload, coupon_code="GONE").json()
        assert data["total"] == 2000.0
        assert data["coupon_code"] is None

    def test_upi_is_paid_immediately(self, client, delivery_payload):
        data = _create_order(client, delivery_payload, payment={"method": "upi"}).json()
        assert data["payment_status"] == "paid"

    def test_missing_delivery_fields(self, client, delivery_payload):
        response = _create_order(client, {**delivery_payload, "phone": "", "city": None})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation"
        assert set(body["messages"]) == {"delivery.phone", "delivery.city"}

    def test_empty_cart(self, client, delivery_payload):
        response = _create_order(client, delivery_payload, lines=[])
        assert response.status_code == 400
        assert "lines" in response.json()["messages"]

    def test_no_valid_products(self, client, delivery_payload):
        response = _create_order(client, delivery_payload, lines=[{"product_id": "prod-retired", "quantity": 1}])
        assert response.status_code == 400
        assert response.json()["messages"] == {"lines": ["No valid product lines"]}

    def test_unknown_customer(self, client, delivery_payload):
        response = _create_order(client, delivery_payload, headers={"X-Customer-Id": "cust-ghost"})
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestOrderHistoryEndpoint:
    def test_history_is_scoped_and_newest_first(self, client, delivery_payload):
        headers = {"X-Customer-Id": "cust-001"}
        first = _create_order(client, delivery_payload, headers=headers).json()["order_id"]
        second = _create_order(client, delivery_payload, headers=headers).json()["order_id"]
        _create_order(client, delivery_payload)

        response = client.get("/orders/me", headers=headers)
        assert response.status_code == 200
        ids = [o["order_id"] for o in response.json()]
        assert set(ids) == {first, second}
        assert ids[0] == second

    def test_history_requires_customer(self, client):
        assert client.get("/orders/me").status_code == 401


class TestCancelEndpoint:
    def test_cancel(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        response = client.post(f"/orders/{order_id}/cancel", json={"reason": "Changed mind"})
        assert response.status_code == 200
        assert response.json()["order_status"] == "cancelled"

    def test_cancel_without_body(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        assert client.post(f"/orders/{order_id}/cancel").status_code == 200

    def test_cancel_shipped_order_is_a_precondition_error(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        client.put(f"/admin/orders/{order_id}", json={"order_status": "shipped"})
        response = client.post(f"/orders/{order_id}/cancel")
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "precondition"
        assert "Cannot cancel order in shipped state" in body["messages"]["order_status"][0]

    def test_cancel_unknown_order(self, client):
        response = client.post("/orders/ord_0000000000000000/cancel")
        assert response.status_code == 404

    def test_cannot_cancel_someone_elses_order(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload, headers={"X-Customer-Id": "cust-001"}).json()["order_id"]
        response = client.post(f"/orders/{order_id}/cancel", headers={"X-Customer-Id": "cust-002"})
        assert response.status_code == 404


class TestOwnership:
    @pytest.mark.parametrize(
        ("action", "body"),
        [("cancel", {}), ("return", {"reason": "Damaged product"}), ("replace", {"reason": "Wrong colour"})],
    )
    def test_customer_order_without_header_is_not_found(self, client, delivery_payload, action, body):
        order_id = _create_order(client, delivery_payload, headers=OWNER).json()["order_id"]
        _deliver(client, order_id)

        response = client.post(f"/orders/{order_id}/{action}", json=body)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert current_domain.repository_for(Order).get_by_order_id(order_id).order_status == "delivered"

    def test_owner_can_request_return(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload, headers=OWNER).json()["order_id"]
        _deliver(client, order_id)
        response = client.post(f"/orders/{order_id}/return", json={"reason": "Damaged product"}, headers=OWNER)
        assert response.status_code == 200

    def test_anonymous_order_needs_no_header(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        response = client.post(f"/orders/{order_id}/cancel", headers=OWNER)
        assert response.status_code == 200


class TestReturnEndpoints:
    def test_return_then_reject(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        _deliver(client, order_id)

        response = client.post(f"/orders/{order_id}/return", json={"reason": "Damaged product"})
        assert response.status_code == 200
        assert response.json()["order_status"] == "return_requested"

        response = client.put(
            f"/admin/orders/{order_id}/return",
            json={"action": "reject", "rejection_reason": "No damage found"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["order_status"] == "return_rejected"
        assert data["lifecycle_phase"] == "returning"
        assert data["lifecycle_sub_state"] == "rejected"
        assert data["return_request"]["rejection_reason"] == "No damage found"
        assert data["return_request"]["rejected_at"] is not None

    def test_return_requires_reason(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        _deliver(client, order_id)
        response = client.post(f"/orders/{order_id}/return", json={"reason": " "})
        assert response.status_code == 400

    def test_return_before_delivery(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        response = client.post(f"/orders/{order_id}/return", json={"reason": "Damaged product"})
        assert response.status_code == 409
        assert "delivery_status" in response.json()["messages"]

    def test_return_after_window(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        _deliver(client, order_id)
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(order_id)
        order.delivered_at = order.delivered_at - timedelta(days=4)
        repo.add(order)
        response = client.post(f"/orders/{order_id}/return", json={"reason": "Damaged product"})
        assert response.status_code == 409
        assert "delivered_at" in response.json()["messages"]

    def test_replacement_then_approve(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        _deliver(client, order_id)
        client.post(f"/orders/{order_id}/replace", json={"reason": "Wrong colour"})
        response = client.put(f"/admin/orders/{order_id}/replace", json={"action": "approve"})
        assert response.status_code == 200
        assert response.json()["order_status"] == "replacement_approved"

    def test_decision_without_request(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        response = client.put(f"/admin/orders/{order_id}/return", json={"action": "approve"})
        assert response.status_code == 409

    def test_unknown_decision_action(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        response = client.put(f"/admin/orders/{order_id}/return", json={"action": "maybe"})
        assert response.status_code == 422


class TestAdminOrderEndpoints:
    def test_list_orders(self, client, delivery_payload):
        _create_order(client, delivery_payload)
        _create_order(client, delivery_payload)
        response = client.get("/admin/orders")
        assert response.status_code == 200
        assert len(response.json()) == 2
        assert response.json()[0]["distance"]["is_local"] is True

    def test_override_rejects_unknown_status(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        response = client.put(f"/admin/orders/{order_id}", json={"payment_status": "maybe"})
        assert response.status_code == 400
        assert "payment_status" in response.json()["messages"]

    @pytest.mark.parametrize("body", [{}, {"order_status": None}])
    def test_override_needs_a_status(self, client, delivery_payload, body):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        assert client.put(f"/admin/orders/{order_id}", json=body).status_code == 400

    def test_override_stamps_delivery(self, client, delivery_payload):
        order_id = _create_order(client, delivery_payload).json()["order_id"]
        assert _deliver(client, order_id)["delivered_at"] is not None


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["storage"] == current_domain.config["databases"]["default"]["provider"]
