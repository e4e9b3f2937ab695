"""Stripe payment gateway adapter.

Creates a PaymentIntent for each order. The intent id is the gateway order
reference stored on the order and later presented back during verification.
"""

import stripe

from payments.gateway.port import GatewayOrder, PaymentGateway
from shared.config import PaymentSettings
from shared.exceptions import GatewayError


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    name = "stripe"

    def __init__(self, settings: PaymentSettings, client: stripe.StripeClient | None = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self) -> stripe.StripeClient:
        if self._client is None:
            _, secret = self.settings.require_credentials()
            self._client = stripe.StripeClient(
                secret,
                http_client=stripe.RequestsClient(timeout=self.settings.timeout_seconds),
            )
        return self._client

    def create_order(
        self,
        amount_minor_units: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
        idempotency_key: str,
    ) -> GatewayOrder:
        try:
            intent = self.client.v1.payment_intents.create(
                params={
                    "amount": amount_minor_units,
                    "currency": currency.lower(),
                    "description": f"Order {receipt}",
                    "metadata": {"receipt": receipt, **notes},
                    "automatic_payment_methods": {"enabled": True},
                },
                options={"idempotency_key": idempotency_key},
            )
        except stripe.StripeError as exc:
            message = exc.user_message or str(exc) or "Stripe request failed"
            raise GatewayError({"gateway": [message]}) from exc

        return GatewayOrder(
            gateway_order_id=intent.id,
            amount_minor_units=intent.amount,
            currency=intent.currency.upper(),
            status=intent.status,
        )
