"""Payment intent creation — command and handler.

    order (stored) ──> gateway.create_order(total in minor units)
                  ──> order.record_payment_intent(gateway reference)

The order already exists when the gateway is called. If the call fails the
order stays as it was and the caller may retry; the idempotency key is
derived from the order's version so a retry against the same state maps onto
the same gateway charge. A pending order that already holds a reference gets
that reference back without a second charge.
"""

from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from pydantic import BaseModel, ConfigDict

from ordering.domain import ordering
from ordering.order.order import Order
from payments.domain import logger
from payments.gateway import get_gateway
from shared.config import get_settings
from shared.exceptions import ExternalDependencyError
from shared.money import to_minor_units


@ordering.command(part_of="Order")
class CreatePaymentIntent:
    order_id = Identifier(required=True)


class PaymentIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    gateway: str
    gateway_order_id: str
    amount_minor_units: int
    currency: str


@ordering.command_handler(part_of=Order)
class PaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command: CreatePaymentIntent) -> PaymentIntent:
        get_settings().payment_settings().require_credentials()

        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(str(command.order_id))
        order.ensure_payable()

        if order.open_gateway_reference:
            logger.info(
                "payment.intent_reused",
                order_id=order.order_id,
                gateway_order_id=order.open_gateway_reference,
            )
            return PaymentIntent(
                order_id=order.order_id,
                gateway=order.payment_details.gateway,
                gateway_order_id=order.open_gateway_reference,
                amount_minor_units=to_minor_units(order.total),
                currency=order.currency,
            )

        amount = to_minor_units(order.total)
        if amount <= 0:
            raise ValidationError({"total": ["Order total must be greater than zero to take a payment"]})

        gateway = get_gateway()
        try:
            gateway_order = gateway.create_order(
                amount_minor_units=amount,
                currency=order.currency,
                receipt=order.order_id,
                notes={"order_id": order.order_id},
                idempotency_key=f"intent-{order.order_id}-v{order._version}",
            )
        except ExternalDependencyError as exc:
            logger.error(
                "payment.intent_failed",
                order_id=order.order_id,
                gateway=gateway.name,
                error_category=exc.category,
                error=str(exc),
            )
            raise

        order.record_payment_intent(
            gateway=gateway.name,
            gateway_order_id=gateway_order.gateway_order_id,
            amount_minor_units=gateway_order.amount_minor_units,
        )
        repo.add(order)

        return PaymentIntent(
            order_id=order.order_id,
            gateway=gateway.name,
            gateway_order_id=gateway_order.gateway_order_id,
            amount_minor_units=gateway_order.amount_minor_units,
            currency=gateway_order.currency,
        )
