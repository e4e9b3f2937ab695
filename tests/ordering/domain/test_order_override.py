"""Tests for the operator status override."""

import pytest
from ordering.order.events import OrderStatusesOverridden
from ordering.order.order import OrderStatus, PaymentStatus
from protean.exceptions import ValidationError


class TestOverrideStatuses:
    def test_any_enumerated_value_is_accepted(self, make_order):
        order = make_order()
        order.cancel()
        order.override_statuses(order_status="shipped", payment_status="paid", delivery_status="out_for_delivery")
        assert order.statuses == {
            "order_status": "shipped",
            "payment_status": "paid",
            "delivery_status": "out_for_delivery",
        }

    def test_values_are_case_insensitive(self, make_order):
        order = make_order()
        order.override_statuses(order_status="  Confirmed ")
        assert order.order_status == OrderStatus.CONFIRMED.value

    def test_omitted_fields_are_left_alone(self, make_order):
        order = make_order(payment_status=PaymentStatus.PAID)
        order.override_statuses(delivery_status="packed")
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.order_status == OrderStatus.CREATED.value

    def test_unknown_value_is_rejected(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError) as exc:
            order.override_statuses(order_status="teleported", delivery_status="lost")
        assert set(exc.value.messages) == {"order_status", "delivery_status"}
        assert "Allowed: created, confirmed" in exc.value.messages["order_status"][0]
        assert order.order_status == OrderStatus.CREATED.value

    def test_invalid_field_blocks_the_whole_edit(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            order.override_statuses(order_status="shipped", payment_status="bogus")
        assert order.order_status == OrderStatus.CREATED.value

    def test_at_least_one_status_required(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError) as exc:
            order.override_statuses()
        assert "statuses" in exc.value.messages

    def test_first_delivery_stamps_delivered_at(self, make_order):
        order = make_order()
        order.override_statuses(order_status="delivered")
        stamped = order.delivered_at
        assert stamped is not None

        order.override_statuses(delivery_status="delivered")
        assert order.delivered_at == stamped

    def test_non_delivery_edit_does_not_stamp(self, make_order):
        order = make_order()
        order.override_statuses(order_status="shipped")
        assert order.delivered_at is None

    def test_raises_event_with_before_and_after(self, make_order):
        order = make_order()
        order._events.clear()
        order.override_statuses(order_status="confirmed")
        events = order._events
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, OrderStatusesOverridden)
        assert event.previous["order_status"] == "created"
        assert event.current["order_status"] == "confirmed"
