"""FastAPI routes for the Payments domain — intents, checkout and verification."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from ordering.api.routes import create_order_command, ensure_owner
from ordering.api.schemas import CreateOrderRequest
from ordering.order.order import Order
from payments.api.schemas import (
    CreatePaymentIntentRequest,
    PaymentIntentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from payments.payment.checkout import CheckoutSession, checkout
from payments.payment.intent import CreatePaymentIntent
from payments.payment.verification import VerifyPayment
from shared.dependencies import optional_customer_id

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(
    body: CreatePaymentIntentRequest,
    customer_id: str | None = Depends(optional_customer_id),
) -> PaymentIntentResponse:
    ensure_owner(current_domain.repository_for(Order).get_by_order_id(body.order_id), customer_id)
    intent = current_domain.process(CreatePaymentIntent(order_id=body.order_id), asynchronous=False)
    return PaymentIntentResponse(**intent.model_dump())


@router.post("/checkout", status_code=201, response_model=CheckoutSession)
async def start_checkout(
    body: CreateOrderRequest,
    customer_id: str | None = Depends(optional_customer_id),
) -> CheckoutSession:
    return checkout(create_order_command(body, customer_id))


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    body: VerifyPaymentRequest,
    customer_id: str | None = Depends(optional_customer_id),
) -> VerifyPaymentResponse:
    repo = current_domain.repository_for(Order)
    if body.order_id:
        order = repo.get_by_order_id(body.order_id)
    else:
        order = repo.get_by_gateway_order_id(body.gateway_order_id)
    ensure_owner(order, customer_id)
    ok = current_domain.process(VerifyPayment(**body.model_dump()), asynchronous=False)
    return VerifyPaymentResponse(ok=ok)
