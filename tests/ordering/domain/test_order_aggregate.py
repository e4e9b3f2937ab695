"""Tests for Order creation, pricing invariants and the derived lifecycle."""

import re

import pytest
from ordering.order.events import OrderCreated
from ordering.order.order import (
    DeliveryAddress,
    DeliveryStatus,
    LifecyclePhase,
    OrderStatus,
    PaymentStatus,
)
from protean.exceptions import IncorrectUsageError, ValidationError


class TestOrderCreation:
    def test_initial_statuses(self, make_order):
        order = make_order()
        assert order.order_status == OrderStatus.CREATED.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.delivery_status == DeliveryStatus.PENDING.value

    def test_order_id_format(self, make_order):
        order = make_order()
        assert re.fullmatch(r"ord_[0-9a-f]{16}", order.order_id)

    def test_order_ids_are_unique(self, make_order):
        assert make_order().order_id != make_order().order_id

    def test_lines_become_entities(self, make_order):
        order = make_order()
        assert len(order.lines) == 1
        assert str(order.lines[0].product_id) == "prod-A"
        assert order.lines[0].quantity == 2

    def test_instant_settlement_starts_paid(self, make_order):
        order = make_order(payment_status=PaymentStatus.PAID)
        assert order.payment_status == PaymentStatus.PAID.value

    def test_coupon_code_is_normalized(self, make_order):
        order = make_order(discount_amount=200.0, coupon_code=" save10 ")
        assert order.coupon_code == "SAVE10"

    def test_blank_coupon_code_is_none(self, make_order):
        assert make_order(coupon_code="   ").coupon_code is None

    def test_created_and_updated_match(self, make_order):
        order = make_order()
        assert order.created_at == order.updated_at

    def test_raises_order_created(self, make_order):
        order = make_order(discount_amount=200.0, coupon_code="SAVE10", customer_id="cust-001")
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderCreated)
        assert event.total == 1800.0
        assert event.coupon_code == "SAVE10"
        assert str(event.customer_id) == "cust-001"
        assert event.delivery["city"] == "Navi Mumbai"

    def test_no_lines(self, delivery_payload):
        from ordering.order.order import Order

        with pytest.raises(ValidationError) as exc:
            Order.create(
                lines=[],
                pricing={"subtotal": 0.0, "total": 0.0, "currency": "INR"},
                delivery=DeliveryAddress(**delivery_payload),
            )
        assert exc.value.messages == {"lines": ["At least one order line is required"]}


class TestPricingInvariants:
    def test_total_must_equal_subtotal_minus_discount(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError) as exc:
            order.total = 1999.0
        assert "total" in exc.value.messages

    def test_discount_cannot_exceed_subtotal(self, make_order):
        with pytest.raises(ValidationError) as exc:
            make_order(subtotal=100.0, discount_amount=250.0)
        assert "discount_amount" in exc.value.messages

    def test_negative_amounts_rejected(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            order.subtotal = -1.0

    def test_rounding_noise_is_tolerated(self, make_order):
        order = make_order(subtotal=0.3, discount_amount=0.1)
        assert order.total == pytest.approx(0.2)


class TestDeliveryAddress:
    def test_from_payload_strips_whitespace(self, delivery_payload):
        address = DeliveryAddress.from_payload({**delivery_payload, "city": "  Pune "})
        assert address.city == "Pune"

    def test_missing_fields_are_all_named(self, delivery_payload):
        payload = {**delivery_payload, "phone": "", "postal_code": None}
        with pytest.raises(ValidationError) as exc:
            DeliveryAddress.from_payload(payload)
        assert set(exc.value.messages) == {"delivery.phone", "delivery.postal_code"}

    def test_missing_payload(self):
        with pytest.raises(ValidationError) as exc:
            DeliveryAddress.from_payload(None)
        assert len(exc.value.messages) == 5

    def test_address_is_immutable(self, make_order):
        order = make_order()
        with pytest.raises(IncorrectUsageError):
            order.delivery.city = "Thane"


class TestLifecycle:
    @pytest.mark.parametrize(
        "status, phase, sub_state",
        [
            ("created", LifecyclePhase.ACTIVE, None),
            ("delivered", LifecyclePhase.ACTIVE, None),
            ("cancelled", LifecyclePhase.CANCELLED, None),
            ("return_requested", LifecyclePhase.RETURNING, "requested"),
            ("return_rejected", LifecyclePhase.RETURNING, "rejected"),
            ("replacement_approved", LifecyclePhase.REPLACING, "approved"),
            ("replaced", LifecyclePhase.REPLACED, None),
        ],
    )
    def test_phase_follows_order_status(self, make_order, status, phase, sub_state):
        order = make_order()
        order.order_status = status
        assert order.lifecycle.phase == phase
        assert order.lifecycle.sub_state == sub_state

    @pytest.mark.parametrize(
        "status, terminal",
        [
            ("cancelled", True),
            ("returned", True),
            ("replaced", True),
            ("return_rejected", True),
            ("replacement_rejected", True),
            ("delivered", False),
            ("return_requested", False),
        ],
    )
    def test_terminal_states(self, make_order, status, terminal):
        order = make_order()
        order.order_status = status
        assert order.is_terminal is terminal

    def test_unknown_status_rejected(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            order.order_status = "teleported"
