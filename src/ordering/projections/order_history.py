"""Order history — a customer's own orders, newest first."""

from datetime import datetime

from protean.utils.globals import current_domain
from pydantic import BaseModel

from ordering.order.order import Order
from ordering.projections.order_detail import (
    DeliveryView,
    LineView,
    PaymentView,
    ServiceRequestView,
    lines_of,
    view_of,
)


class OrderHistoryEntry(BaseModel):
    order_id: str
    order_status: str
    payment_status: str
    delivery_status: str
    subtotal: float
    discount_amount: float
    total: float
    coupon_code: str | None = None
    currency: str
    lines: list[LineView]
    delivery: DeliveryView
    payment: PaymentView
    return_request: ServiceRequestView | None = None
    replacement_request: ServiceRequestView | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderHistoryEntry":
        return cls(
            order_id=order.order_id,
            order_status=order.order_status,
            payment_status=order.payment_status,
            delivery_status=order.delivery_status,
            subtotal=order.subtotal,
            discount_amount=order.discount_amount or 0.0,
            total=order.total,
            coupon_code=order.coupon_code,
            currency=order.currency,
            lines=lines_of(order),
            delivery=view_of(DeliveryView, order.delivery),
            payment=view_of(PaymentView, order.payment) or PaymentView(),
            return_request=view_of(ServiceRequestView, order.return_request),
            replacement_request=view_of(ServiceRequestView, order.replacement_request),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def order_history(customer_id: str) -> list[OrderHistoryEntry]:
    orders = current_domain.repository_for(Order).list_for_customer(customer_id)
    return [OrderHistoryEntry.from_order(order) for order in orders]
