"""Order detail — full operator view of an order.

Read straight from the Order aggregate; the nested views mirror its value
objects so the response shape does not depend on how they are stored.
"""

from datetime import datetime

from protean.utils.globals import current_domain
from pydantic import BaseModel

from ordering.order.order import Order


class LineView(BaseModel):
    product_id: str
    quantity: int


class CustomerView(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class DeliveryView(BaseModel):
    full_name: str
    phone: str
    address_line: str
    city: str
    postal_code: str


class PaymentView(BaseModel):
    method: str | None = None
    gateway: str | None = None
    gateway_order_id: str | None = None
    gateway_payment_id: str | None = None
    signature: str | None = None


class ServiceRequestView(BaseModel):
    reason: str
    description: str | None = None
    requested_at: datetime
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None


class DistanceView(BaseModel):
    kilometers: float
    is_local: bool


def lines_of(order: Order) -> list[LineView]:
    return [LineView(product_id=str(line.product_id), quantity=line.quantity) for line in order.lines]


def view_of(view_cls, value_object):
    return view_cls.model_validate(value_object.to_dict()) if value_object else None


class OrderDetail(BaseModel):
    order_id: str
    customer_id: str | None = None
    customer: CustomerView
    lines: list[LineView]
    subtotal: float
    discount_amount: float
    total: float
    coupon_code: str | None = None
    currency: str
    delivery: DeliveryView
    payment: PaymentView
    order_status: str
    payment_status: str
    delivery_status: str
    lifecycle_phase: str
    lifecycle_sub_state: str | None = None
    return_request: ServiceRequestView | None = None
    replacement_request: ServiceRequestView | None = None
    distance: DistanceView | None = None
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderDetail":
        lifecycle = order.lifecycle
        customer = order.customer.to_dict() if order.customer else {}
        return cls(
            order_id=order.order_id,
            customer_id=order.customer_id,
            customer=CustomerView(id=order.customer_id, **customer),
            lines=lines_of(order),
            subtotal=order.subtotal,
            discount_amount=order.discount_amount or 0.0,
            total=order.total,
            coupon_code=order.coupon_code,
            currency=order.currency,
            delivery=view_of(DeliveryView, order.delivery),
            payment=view_of(PaymentView, order.payment) or PaymentView(),
            order_status=order.order_status,
            payment_status=order.payment_status,
            delivery_status=order.delivery_status,
            lifecycle_phase=lifecycle.phase.value,
            lifecycle_sub_state=lifecycle.sub_state,
            return_request=view_of(ServiceRequestView, order.return_request),
            replacement_request=view_of(ServiceRequestView, order.replacement_request),
            distance=view_of(DistanceView, order.distance),
            cancellation_reason=order.cancellation_reason,
            cancelled_at=order.cancelled_at,
            delivered_at=order.delivered_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def all_orders() -> list[OrderDetail]:
    """Every order, newest first."""
    return [OrderDetail.from_order(order) for order in current_domain.repository_for(Order).list_all()]
