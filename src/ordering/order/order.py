"""Order aggregate — the core of the ordering domain.

An order carries three correlated status fields. ``order_status`` tracks
fulfillment and the return/replacement sub-flows, ``payment_status`` and
``delivery_status`` track money and parcel respectively.

Guarded transitions (customer and operator):
    created/confirmed --cancel--> cancelled            (paid → refunded)
    delivered --request_return--> return_requested --approve--> return_approved
                                                   --reject---> return_rejected
    delivered --request_replacement--> replacement_requested --approve/reject--> ...

Return and replacement are mutually exclusive: once either sub-flow starts the
order leaves the Active phase and no further request is accepted.

Operators may also set any status to any enumerated value through
``override_statuses``. No transition guards apply on that path.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import InvalidStateError, ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderCreated,
    OrderStatusesOverridden,
    PaymentFailed,
    PaymentIntentRecorded,
    PaymentSucceeded,
    ReplacementApproved,
    ReplacementRejected,
    ReplacementRequested,
    ReturnApproved,
    ReturnRejected,
    ReturnRequested,
)
from shared import clock
from shared.money import quantize


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CREATED = "created"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURN_REQUESTED = "return_requested"
    RETURN_APPROVED = "return_approved"
    RETURN_REJECTED = "return_rejected"
    RETURNED = "returned"
    REPLACEMENT_REQUESTED = "replacement_requested"
    REPLACEMENT_APPROVED = "replacement_approved"
    REPLACEMENT_REJECTED = "replacement_rejected"
    REPLACED = "replaced"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class DeliveryStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PACKED = "packed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"


class LifecyclePhase(Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    RETURNING = "returning"
    REPLACING = "replacing"
    RETURNED = "returned"
    REPLACED = "replaced"


class ServiceKind(Enum):
    RETURN = "return"
    REPLACEMENT = "replacement"


# States from which the customer may cancel
_CANCELLABLE_STATES = {OrderStatus.CREATED, OrderStatus.CONFIRMED}

TERMINAL_STATES = {
    OrderStatus.CANCELLED,
    OrderStatus.RETURNED,
    OrderStatus.REPLACED,
    OrderStatus.RETURN_REJECTED,
    OrderStatus.REPLACEMENT_REJECTED,
}

# Payment captured by the gateway
_SETTLED_PAYMENTS = {PaymentStatus.PAID.value, PaymentStatus.REFUNDED.value}

# order_status → (phase, sub-state)
_LIFECYCLE = {
    OrderStatus.CREATED: (LifecyclePhase.ACTIVE, None),
    OrderStatus.CONFIRMED: (LifecyclePhase.ACTIVE, None),
    OrderStatus.SHIPPED: (LifecyclePhase.ACTIVE, None),
    OrderStatus.DELIVERED: (LifecyclePhase.ACTIVE, None),
    OrderStatus.CANCELLED: (LifecyclePhase.CANCELLED, None),
    OrderStatus.RETURN_REQUESTED: (LifecyclePhase.RETURNING, "requested"),
    OrderStatus.RETURN_APPROVED: (LifecyclePhase.RETURNING, "approved"),
    OrderStatus.RETURN_REJECTED: (LifecyclePhase.RETURNING, "rejected"),
    OrderStatus.RETURNED: (LifecyclePhase.RETURNED, None),
    OrderStatus.REPLACEMENT_REQUESTED: (LifecyclePhase.REPLACING, "requested"),
    OrderStatus.REPLACEMENT_APPROVED: (LifecyclePhase.REPLACING, "approved"),
    OrderStatus.REPLACEMENT_REJECTED: (LifecyclePhase.REPLACING, "rejected"),
    OrderStatus.REPLACED: (LifecyclePhase.REPLACED, None),
}

# Sub-flow vocabulary: kind → (requested, approved, rejected)
_SERVICE_STATUSES = {
    ServiceKind.RETURN: (
        OrderStatus.RETURN_REQUESTED,
        OrderStatus.RETURN_APPROVED,
        OrderStatus.RETURN_REJECTED,
    ),
    ServiceKind.REPLACEMENT: (
        OrderStatus.REPLACEMENT_REQUESTED,
        OrderStatus.REPLACEMENT_APPROVED,
        OrderStatus.REPLACEMENT_REJECTED,
    ),
}

_PHASE_KIND = {
    LifecyclePhase.RETURNING: ServiceKind.RETURN,
    LifecyclePhase.REPLACING: ServiceKind.REPLACEMENT,
}

_ADDRESS_FIELDS = ("full_name", "phone", "address_line", "city", "postal_code")

DEFAULT_SERVICE_WINDOW = timedelta(days=3)


def new_order_id() -> str:
    return f"ord_{secrets.token_hex(8)}"


def _allowed(enum_cls) -> str:
    return ", ".join(member.value for member in enum_cls)


def _clean(value) -> str | None:
    return (value or "").strip() or None


@dataclass(frozen=True)
class Lifecycle:
    """Flattened view of ``order_status``: a phase plus an optional sub-state."""

    phase: LifecyclePhase
    sub_state: str | None = None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class DeliveryAddress:
    """Shipping details captured at checkout.

    Immutable once on an Order: it records where the order was sent, even if
    the customer's saved addresses change later.
    """

    full_name = String(required=True, max_length=255, sanitize=False)
    phone = String(required=True, max_length=32)
    address_line = String(required=True, max_length=500, sanitize=False)
    city = String(required=True, max_length=100, sanitize=False)
    postal_code = String(required=True, max_length=20)

    @classmethod
    def from_payload(cls, payload) -> "DeliveryAddress":
        """Build an address from loose input, naming every missing field at once."""
        data = {field: str((payload or {}).get(field) or "").strip() for field in _ADDRESS_FIELDS}
        missing = [field for field, value in data.items() if not value]
        if missing:
            raise ValidationError({f"delivery.{field}": ["This field is required"] for field in missing})
        return cls(**data)


@ordering.value_object(part_of="Order")
class CustomerSnapshot:
    """Customer contact details as they were when the order was placed."""

    name = String(max_length=255, sanitize=False)
    email = String(max_length=255)
    phone = String(max_length=32)


@ordering.value_object(part_of="Order")
class DistanceInfo:
    kilometers = Float(required=True, min_value=0.0)
    is_local = Boolean(default=False)


@ordering.value_object(part_of="Order")
class PaymentDetails:
    method = String(max_length=50)
    gateway = String(max_length=20)
    gateway_order_id = String(max_length=255)
    gateway_payment_id = String(max_length=255)
    signature = String(max_length=255)


@ordering.value_object(part_of="Order")
class ServiceRequest:
    """A return or replacement request and the operator's decision on it."""

    reason = String(required=True, max_length=500, sanitize=False)
    description = Text(sanitize=False)
    requested_at = DateTime(required=True)
    approved_at = DateTime()
    rejected_at = DateTime()
    rejection_reason = String(max_length=500, sanitize=False)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_id = String(max_length=40, unique=True, default=new_order_id)
    customer_id = Identifier()
    customer = ValueObject(CustomerSnapshot)
    lines = HasMany(OrderLine)
    subtotal = Float(required=True, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    coupon_code = String(max_length=64)
    currency = String(required=True, min_length=3, max_length=3)
    delivery = ValueObject(DeliveryAddress, required=True)
    payment = ValueObject(PaymentDetails)
    order_status = String(choices=OrderStatus, default=OrderStatus.CREATED.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    delivery_status = String(choices=DeliveryStatus, default=DeliveryStatus.PENDING.value)
    return_request = ValueObject(ServiceRequest)
    replacement_request = ValueObject(ServiceRequest)
    distance = ValueObject(DistanceInfo)
    cancellation_reason = String(max_length=500, sanitize=False)
    cancelled_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def pricing_must_balance(self):
        if self.subtotal is None or self.total is None:
            return
        discount = self.discount_amount or 0.0
        if discount > self.subtotal:
            raise ValidationError({"discount_amount": ["Discount cannot exceed the subtotal"]})
        if quantize(self.total) != quantize(max(quantize(self.subtotal) - quantize(discount), 0)):
            raise ValidationError({"total": ["Total must equal subtotal minus discount"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        lines,
        pricing,
        delivery,
        customer_id=None,
        customer=None,
        payment=None,
        payment_status=PaymentStatus.PENDING,
        distance=None,
        order_id=None,
    ):
        """Create a new order from a priced checkout.

        Args:
            lines: Iterable of dicts with product_id and quantity.
            pricing: Dict with subtotal, discount_amount, total, currency and
                     optionally coupon_code.
            delivery: DeliveryAddress captured at checkout.
            customer_id: Owning customer, or None for guest checkouts.
            customer: CustomerSnapshot taken from the customer's profile.
            payment: PaymentDetails (method, gateway) chosen at checkout.
            payment_status: PENDING, or PAID for methods that settle at once.
            distance: DistanceInfo estimated for the delivery address.
        """
        lines = [OrderLine(product_id=line["product_id"], quantity=line["quantity"]) for line in lines]
        if not lines:
            raise ValidationError({"lines": ["At least one order line is required"]})

        now = clock.now()
        order = cls(
            order_id=order_id or new_order_id(),
            customer_id=customer_id,
            customer=customer,
            lines=lines,
            subtotal=pricing["subtotal"],
            discount_amount=pricing.get("discount_amount", 0.0),
            total=pricing["total"],
            coupon_code=(_clean(pricing.get("coupon_code")) or "").upper() or None,
            currency=pricing["currency"],
            delivery=delivery,
            payment=payment,
            order_status=OrderStatus.CREATED.value,
            payment_status=PaymentStatus(payment_status).value,
            delivery_status=DeliveryStatus.PENDING.value,
            distance=distance,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=order.order_id,
                customer_id=order.customer_id,
                line_count=len(lines),
                subtotal=order.subtotal,
                discount_amount=order.discount_amount,
                total=order.total,
                currency=order.currency,
                coupon_code=order.coupon_code,
                payment_status=order.payment_status,
                delivery=delivery.to_dict(),
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def lifecycle(self) -> Lifecycle:
        phase, sub_state = _LIFECYCLE[OrderStatus(self.order_status)]
        return Lifecycle(phase=phase, sub_state=sub_state)

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.order_status) in TERMINAL_STATES

    @property
    def is_effectively_delivered(self) -> bool:
        return (
            self.order_status == OrderStatus.DELIVERED.value
            or self.delivery_status == DeliveryStatus.DELIVERED.value
        )

    @property
    def statuses(self) -> dict[str, str]:
        return {
            "order_status": self.order_status,
            "payment_status": self.payment_status,
            "delivery_status": self.delivery_status,
        }

    @property
    def payment_details(self) -> PaymentDetails:
        # An all-empty value object reads back as None
        return self.payment or PaymentDetails()

    @property
    def open_gateway_reference(self) -> str | None:
        """The gateway charge still awaiting its callback, if any."""
        if self.payment_status == PaymentStatus.PENDING.value:
            return self.payment_details.gateway_order_id
        return None

    def service_window_anchor(self) -> datetime:
        """When the return/replacement window started: delivery, else last update."""
        return clock.as_utc(self.delivered_at or self.updated_at)

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason=None):
        """Cancel the order. A captured payment becomes refunded (status only)."""
        current = OrderStatus(self.order_status)
        if current not in _CANCELLABLE_STATES:
            raise InvalidStateError(
                {
                    "order_status": [
                        f"Cannot cancel order in {current.value} state. "
                        f"Cancellation is only allowed from: created, confirmed"
                    ]
                }
            )

        refunded = self.payment_status == PaymentStatus.PAID.value
        now = clock.now()
        with atomic_change(self):
            self.order_status = OrderStatus.CANCELLED.value
            if refunded:
                self.payment_status = PaymentStatus.REFUNDED.value
            self.cancellation_reason = _clean(reason)
            self.cancelled_at = now
            self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=self.order_id,
                reason=self.cancellation_reason,
                payment_refunded=refunded,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Returns & Replacements
    # -------------------------------------------------------------------
    def request_return(self, reason, description=None, window=DEFAULT_SERVICE_WINDOW, now=None):
        """Request a return of a delivered order within the return window."""
        self._request_service(ServiceKind.RETURN, reason, description, window, now)

    def request_replacement(self, reason, description=None, window=DEFAULT_SERVICE_WINDOW, now=None):
        """Request a replacement of a delivered order within the return window."""
        self._request_service(ServiceKind.REPLACEMENT, reason, description, window, now)

    def approve_return(self):
        self._decide_service(ServiceKind.RETURN, approve=True)

    def reject_return(self, rejection_reason):
        self._decide_service(ServiceKind.RETURN, approve=False, rejection_reason=rejection_reason)

    def approve_replacement(self):
        self._decide_service(ServiceKind.REPLACEMENT, approve=True)

    def reject_replacement(self, rejection_reason):
        self._decide_service(ServiceKind.REPLACEMENT, approve=False, rejection_reason=rejection_reason)

    def _request_service(self, kind, reason, description, window, now):
        reason = _clean(reason)
        if not reason:
            raise ValidationError({"reason": [f"A reason is required to request a {kind.value}"]})

        lifecycle = self.lifecycle
        if lifecycle.phase in (LifecyclePhase.RETURNING, LifecyclePhase.REPLACING):
            raise InvalidStateError(
                {
                    "order_status": [
                        f"A {_PHASE_KIND[lifecycle.phase].value} request already exists "
                        f"for this order ({self.order_status})"
                    ]
                }
            )
        if lifecycle.phase != LifecyclePhase.ACTIVE:
            raise InvalidStateError(
                {"order_status": [f"Cannot request a {kind.value} for an order in {self.order_status} state"]}
            )
        if not self.is_effectively_delivered:
            raise InvalidStateError({"delivery_status": [f"Only delivered orders are eligible for a {kind.value}"]})

        now = now or clock.now()
        if window is not None and now - self.service_window_anchor() > window:
            raise InvalidStateError(
                {"delivered_at": [f"The {window.days}-day {kind.value} window for this order has closed"]}
            )

        request = ServiceRequest(reason=reason, description=_clean(description), requested_at=now)
        requested, _, _ = _SERVICE_STATUSES[kind]
        with atomic_change(self):
            if kind == ServiceKind.RETURN:
                self.return_request = request
            else:
                self.replacement_request = request
            self.order_status = requested.value
            self.updated_at = now

        event_cls = ReturnRequested if kind == ServiceKind.RETURN else ReplacementRequested
        self.raise_(event_cls(order_id=self.order_id, reason=reason, requested_at=now))

    def _decide_service(self, kind, approve, rejection_reason=None):
        requested, approved, rejected = _SERVICE_STATUSES[kind]
        if self.order_status != requested.value:
            raise InvalidStateError({"order_status": [f"No {kind.value} request found for this order"]})

        if not approve:
            rejection_reason = _clean(rejection_reason)
            if not rejection_reason:
                raise ValidationError({"rejection_reason": [f"A reason is required to reject a {kind.value}"]})

        attr = "return_request" if kind == ServiceKind.RETURN else "replacement_request"
        current_request = getattr(self, attr)
        if current_request is None:
            raise InvalidStateError({attr: [f"No {kind.value} request found for this order"]})

        now = clock.now()
        if approve:
            with atomic_change(self):
                setattr(self, attr, current_request.replace(approved_at=now))
                self.order_status = approved.value
                self.updated_at = now
            event_cls = ReturnApproved if kind == ServiceKind.RETURN else ReplacementApproved
            self.raise_(event_cls(order_id=self.order_id, approved_at=now))
        else:
            with atomic_change(self):
                setattr(self, attr, current_request.replace(rejected_at=now, rejection_reason=rejection_reason))
                self.order_status = rejected.value
                self.updated_at = now
            event_cls = ReturnRejected if kind == ServiceKind.RETURN else ReplacementRejected
            self.raise_(event_cls(order_id=self.order_id, rejection_reason=rejection_reason, rejected_at=now))

    # -------------------------------------------------------------------
    # Operator override
    # -------------------------------------------------------------------
    def override_statuses(self, order_status=None, payment_status=None, delivery_status=None):
        """Set any status field to any enumerated value. No transition guards apply."""
        requested = {
            "order_status": (order_status, OrderStatus),
            "payment_status": (payment_status, PaymentStatus),
            "delivery_status": (delivery_status, DeliveryStatus),
        }
        changes = {}
        errors = {}
        for field, (value, enum_cls) in requested.items():
            if value is None:
                continue
            try:
                changes[field] = enum_cls(str(value).strip().lower()).value
            except ValueError:
                errors[field] = [f"'{value}' is not a valid {field}. Allowed: {_allowed(enum_cls)}"]
        if errors:
            raise ValidationError(errors)
        if not changes:
            raise ValidationError({"statuses": ["Provide at least one of order_status, payment_status, delivery_status"]})

        previous = self.statuses
        now = clock.now()
        with atomic_change(self):
            for field, value in changes.items():
                setattr(self, field, value)
            if self.delivered_at is None and self.is_effectively_delivered:
                self.delivered_at = now
            self.updated_at = now

        self.raise_(
            OrderStatusesOverridden(
                order_id=self.order_id,
                previous=previous,
                current=self.statuses,
                overridden_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def ensure_payable(self):
        """Raise unless the order can still take a payment."""
        if self.order_status == OrderStatus.CANCELLED.value:
            raise InvalidStateError({"order_status": ["Order is cancelled"]})
        if self.payment_status in _SETTLED_PAYMENTS:
            raise InvalidStateError({"payment_status": [f"Payment is already {self.payment_status}"]})

    def record_payment_intent(self, gateway, gateway_order_id, amount_minor_units):
        """Tie this order 1:1 to a gateway charge reference.

        A pending order keeps the charge it already has. After a failed
        verification the new charge replaces the old one and the order is
        pending again.
        """
        self.ensure_payable()
        if self.open_gateway_reference:
            raise InvalidStateError(
                {"payment": [f"Order already has an open gateway charge ({self.open_gateway_reference})"]}
            )

        now = clock.now()
        payment = self.payment_details.replace(
            gateway=gateway,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=None,
            signature=None,
        )
        with atomic_change(self):
            self.payment = payment
            self.payment_status = PaymentStatus.PENDING.value
            self.updated_at = now

        self.raise_(
            PaymentIntentRecorded(
                order_id=self.order_id,
                gateway=gateway,
                gateway_order_id=gateway_order_id,
                amount_minor_units=amount_minor_units,
                recorded_at=now,
            )
        )

    def record_payment_verification(self, gateway_payment_id, signature, verified) -> bool:
        """Record the outcome of a signature check on a gateway callback.

        Returns whether the order changed. A valid payment arriving after the
        order was cancelled is recorded as refunded, matching what cancelling a
        paid order does. Once a payment is captured, a replay of the same
        callback changes nothing and a failed check never downgrades it.
        """
        if self.payment_status in _SETTLED_PAYMENTS:
            if not verified or self.payment_details.gateway_payment_id == gateway_payment_id:
                return False
            raise InvalidStateError(
                {"payment_status": [f"Payment is already {self.payment_status} with a different payment id"]}
            )

        now = clock.now()
        payment = self.payment_details.replace(gateway_payment_id=gateway_payment_id, signature=signature)
        if not verified:
            with atomic_change(self):
                self.payment = payment
                self.payment_status = PaymentStatus.FAILED.value
                self.updated_at = now
            self.raise_(
                PaymentFailed(
                    order_id=self.order_id,
                    gateway_payment_id=gateway_payment_id,
                    reason="Signature mismatch",
                    failed_at=now,
                )
            )
            return True

        refunded = self.order_status == OrderStatus.CANCELLED.value
        with atomic_change(self):
            self.payment = payment
            self.payment_status = PaymentStatus.REFUNDED.value if refunded else PaymentStatus.PAID.value
            self.updated_at = now
        self.raise_(
            PaymentSucceeded(
                order_id=self.order_id,
                gateway_payment_id=gateway_payment_id,
                refunded_on_arrival=refunded,
                verified_at=now,
            )
        )
        return True
