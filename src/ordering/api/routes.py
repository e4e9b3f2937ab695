"""FastAPI routes for the Ordering domain — orders and coupons."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    CancelOrderRequest,
    CouponResponse,
    CouponValidationResponse,
    CreateCouponRequest,
    CreateOrderRequest,
    OverrideStatusesRequest,
    PublicCouponResponse,
    ServiceDecisionRequest,
    ServiceRequestBody,
    UpdateCouponRequest,
    ValidateCouponRequest,
)
from ordering.coupon.coupon import Coupon
from ordering.coupon.management import CreateCoupon, DeleteCoupon, UpdateCoupon
from ordering.coupon.resolution import DiscountResolver
from ordering.order.creation import CreateOrder
from ordering.order.order import Order
from ordering.order.transitions import transition_order
from ordering.projections.order_detail import OrderDetail, all_orders
from ordering.projections.order_history import OrderHistoryEntry, order_history
from shared.dependencies import optional_customer_id, required_customer_id


def create_order_command(body: CreateOrderRequest, customer_id: str | None) -> CreateOrder:
    return CreateOrder(
        lines=[line.model_dump() for line in body.lines],
        delivery=body.delivery.model_dump() if body.delivery else {},
        payment_method=body.payment.method if body.payment else None,
        coupon_code=body.coupon_code,
        customer_id=customer_id,
    )


def ensure_owner(order: Order, customer_id: str | None) -> None:
    """An order placed by a customer is only visible to that customer.

    A foreign order, or a customer's order requested without the header,
    reads as missing.
    """
    if order.customer_id and str(order.customer_id) != customer_id:
        raise ObjectNotFoundError({"order_id": [f"Order {order.order_id} not found"]})


def _owned_transition(order_id: str, customer_id: str | None, action: str, payload: dict) -> Order:
    ensure_owner(current_domain.repository_for(Order).get_by_order_id(order_id), customer_id)
    return transition_order(order_id, action, payload)


# ---------------------------------------------------------------------------
# Order Router (customer-facing)
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderHistoryEntry)
async def create_order(
    body: CreateOrderRequest,
    customer_id: str | None = Depends(optional_customer_id),
) -> OrderHistoryEntry:
    order = current_domain.process(create_order_command(body, customer_id), asynchronous=False)
    return OrderHistoryEntry.from_order(order)


@order_router.get("/me", response_model=list[OrderHistoryEntry])
async def my_orders(customer_id: str = Depends(required_customer_id)) -> list[OrderHistoryEntry]:
    return order_history(customer_id)


@order_router.post("/{order_id}/cancel", response_model=OrderHistoryEntry)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    customer_id: str | None = Depends(optional_customer_id),
) -> OrderHistoryEntry:
    order = _owned_transition(order_id, customer_id, "cancel", {"reason": body.reason if body else None})
    return OrderHistoryEntry.from_order(order)


@order_router.post("/{order_id}/return", response_model=OrderHistoryEntry)
async def request_return(
    order_id: str,
    body: ServiceRequestBody,
    customer_id: str | None = Depends(optional_customer_id),
) -> OrderHistoryEntry:
    order = _owned_transition(order_id, customer_id, "requestReturn", body.model_dump())
    return OrderHistoryEntry.from_order(order)


@order_router.post("/{order_id}/replace", response_model=OrderHistoryEntry)
async def request_replacement(
    order_id: str,
    body: ServiceRequestBody,
    customer_id: str | None = Depends(optional_customer_id),
) -> OrderHistoryEntry:
    order = _owned_transition(order_id, customer_id, "requestReplacement", body.model_dump())
    return OrderHistoryEntry.from_order(order)


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.get("", response_model=list[OrderDetail])
async def list_orders() -> list[OrderDetail]:
    return all_orders()


@admin_order_router.put("/{order_id}", response_model=OrderDetail)
async def override_statuses(order_id: str, body: OverrideStatusesRequest) -> OrderDetail:
    order = transition_order(order_id, "setStatuses", body.model_dump())
    return OrderDetail.from_order(order)


@admin_order_router.put("/{order_id}/return", response_model=OrderDetail)
async def decide_return(order_id: str, body: ServiceDecisionRequest) -> OrderDetail:
    if body.action == "approve":
        order = transition_order(order_id, "approveReturn")
    else:
        order = transition_order(order_id, "rejectReturn", {"rejection_reason": body.rejection_reason})
    return OrderDetail.from_order(order)


@admin_order_router.put("/{order_id}/replace", response_model=OrderDetail)
async def decide_replacement(order_id: str, body: ServiceDecisionRequest) -> OrderDetail:
    if body.action == "approve":
        order = transition_order(order_id, "approveReplacement")
    else:
        order = transition_order(order_id, "rejectReplacement", {"rejection_reason": body.rejection_reason})
    return OrderDetail.from_order(order)


# ---------------------------------------------------------------------------
# Coupon Routers
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.get("", response_model=list[PublicCouponResponse])
async def usable_coupons() -> list[PublicCouponResponse]:
    return [PublicCouponResponse.from_coupon(c) for c in DiscountResolver().usable_coupons()]


@coupon_router.post("/validate", response_model=CouponValidationResponse)
async def validate_coupon(body: ValidateCouponRequest) -> CouponValidationResponse:
    evaluation = DiscountResolver().validate(body.code, body.subtotal)
    return CouponValidationResponse.from_evaluation(evaluation)


admin_coupon_router = APIRouter(prefix="/admin/coupons", tags=["admin"])


@admin_coupon_router.get("", response_model=list[CouponResponse])
async def list_coupons() -> list[CouponResponse]:
    return [CouponResponse.from_coupon(c) for c in current_domain.repository_for(Coupon).list_all()]


@admin_coupon_router.post("", status_code=201, response_model=CouponResponse)
async def create_coupon(body: CreateCouponRequest) -> CouponResponse:
    payload = body.model_dump()
    payload["discount_type"] = body.discount_type.value
    coupon = current_domain.process(CreateCoupon(**payload), asynchronous=False)
    return CouponResponse.from_coupon(coupon)


@admin_coupon_router.put("/{code}", response_model=CouponResponse)
async def update_coupon(code: str, body: UpdateCouponRequest) -> CouponResponse:
    changes = body.model_dump(exclude_unset=True)
    if changes.get("discount_type") is not None:
        changes["discount_type"] = changes["discount_type"].value
    coupon = current_domain.process(UpdateCoupon(code=code, changes=changes), asynchronous=False)
    return CouponResponse.from_coupon(coupon)


@admin_coupon_router.delete("/{code}", status_code=204)
async def delete_coupon(code: str) -> None:
    current_domain.process(DeleteCoupon(code=code), asynchronous=False)
