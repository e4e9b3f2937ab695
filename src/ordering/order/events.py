"""Domain events for the Order aggregate.

Raised by the aggregate while it mutates and dispatched once the unit of work
that saved the order commits, so a rejected or conflicting write never
produces an event.
"""

from protean.fields import Boolean, DateTime, Dict, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderCreated:
    """A priced order was created at checkout."""

    __version__ = 1

    order_id = String(required=True)
    customer_id = Identifier()
    line_count = Integer(required=True)
    subtotal = Float(required=True)
    discount_amount = Float(default=0.0)
    total = Float(required=True)
    currency = String(max_length=3, required=True)
    coupon_code = String(max_length=64)
    payment_status = String(max_length=20, required=True)
    delivery = Dict()
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = String(required=True)
    reason = String(max_length=500, sanitize=False)
    payment_refunded = Boolean(default=False)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnRequested:
    __version__ = 1

    order_id = String(required=True)
    reason = String(required=True, max_length=500, sanitize=False)
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnApproved:
    __version__ = 1

    order_id = String(required=True)
    approved_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnRejected:
    __version__ = 1

    order_id = String(required=True)
    rejection_reason = String(required=True, max_length=500, sanitize=False)
    rejected_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReplacementRequested:
    __version__ = 1

    order_id = String(required=True)
    reason = String(required=True, max_length=500, sanitize=False)
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReplacementApproved:
    __version__ = 1

    order_id = String(required=True)
    approved_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReplacementRejected:
    __version__ = 1

    order_id = String(required=True)
    rejection_reason = String(required=True, max_length=500, sanitize=False)
    rejected_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusesOverridden:
    """An operator set one or more status fields directly, bypassing the guards."""

    __version__ = 1

    order_id = String(required=True)
    previous = Dict(required=True)
    current = Dict(required=True)
    overridden_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentIntentRecorded:
    __version__ = 1

    order_id = String(required=True)
    gateway = String(required=True, max_length=20)
    gateway_order_id = String(required=True, max_length=255)
    amount_minor_units = Integer(required=True)
    recorded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentSucceeded:
    __version__ = 1

    order_id = String(required=True)
    gateway_payment_id = String(required=True, max_length=255)
    refunded_on_arrival = Boolean(default=False)
    verified_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentFailed:
    __version__ = 1

    order_id = String(required=True)
    gateway_payment_id = String(required=True, max_length=255)
    reason = String(required=True, max_length=255)
    failed_at = DateTime(required=True)
