"""Gateway checkout — create the order, then its payment intent.

Returns everything the storefront needs to open the gateway's payment
widget. The order is created pending; only a verified callback marks it paid.
"""

from protean.utils.globals import current_domain
from pydantic import BaseModel, ConfigDict

from ordering.order.creation import CreateOrder
from payments.domain import logger
from payments.payment.intent import CreatePaymentIntent
from shared.config import get_settings

CHECKOUT_PAYMENT_METHOD = "upi"


class CheckoutPrefill(BaseModel):
    name: str = ""
    contact: str = ""


class CheckoutSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    key_id: str
    order_id: str
    gateway_order_id: str
    amount: int
    currency: str
    name: str
    description: str
    prefill: CheckoutPrefill


def checkout(command: CreateOrder) -> CheckoutSession:
    """Place a pending gateway order and open its payment intent."""
    settings = get_settings().payment_settings()
    key_id, _ = settings.require_credentials()

    order = current_domain.process(
        CreateOrder(
            **{
                **command.payload,
                "payment_method": CHECKOUT_PAYMENT_METHOD,
                "gateway": settings.gateway,
                "settle_instantly": False,
            }
        ),
        asynchronous=False,
    )
    intent = current_domain.process(CreatePaymentIntent(order_id=order.order_id), asynchronous=False)
    logger.info(
        "payment.checkout_started",
        order_id=order.order_id,
        gateway_order_id=intent.gateway_order_id,
        amount_minor_units=intent.amount_minor_units,
    )

    return CheckoutSession(
        key_id=key_id,
        order_id=order.order_id,
        gateway_order_id=intent.gateway_order_id,
        amount=intent.amount_minor_units,
        currency=intent.currency,
        name=settings.store_name,
        description=f"Order {order.order_id}",
        prefill=CheckoutPrefill(name=order.delivery.full_name, contact=order.delivery.phone),
    )
