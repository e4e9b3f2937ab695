"""Tests for the Stripe adapter against a stand-in client object."""

from types import SimpleNamespace

import pytest
import stripe
from payments.gateway.stripe_adapter import StripeGateway
from shared.config import PaymentSettings
from shared.exceptions import ConfigurationError, GatewayError


class RecordingPaymentIntents:
    def __init__(self, error=None):
        self.error = error
        self.requests = []

    def create(self, params=None, options=None):
        self.requests.append({"params": params, "options": options})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            id="pi_3P0abc",
            amount=params["amount"],
            currency=params["currency"],
            status="requires_payment_method",
        )


@pytest.fixture()
def stripe_settings():
    return PaymentSettings(gateway="stripe", key_id="pk_test_123", key_secret="sk_test_123")


def _gateway(settings, intents):
    return StripeGateway(settings, client=SimpleNamespace(v1=SimpleNamespace(payment_intents=intents)))


def _create(gateway):
    return gateway.create_order(
        amount_minor_units=180000,
        currency="INR",
        receipt="ord_1",
        notes={"order_id": "ord_1"},
        idempotency_key="intent-ord_1-v1",
    )


class TestStripeGateway:
    def test_creates_payment_intent(self, stripe_settings):
        intents = RecordingPaymentIntents()
        gateway_order = _create(_gateway(stripe_settings, intents))

        assert gateway_order.gateway_order_id == "pi_3P0abc"
        assert gateway_order.amount_minor_units == 180000
        assert gateway_order.currency == "INR"
        assert gateway_order.status == "requires_payment_method"

        request = intents.requests[0]
        assert request["params"]["amount"] == 180000
        assert request["params"]["currency"] == "inr"
        assert request["params"]["metadata"] == {"receipt": "ord_1", "order_id": "ord_1"}
        assert request["options"] == {"idempotency_key": "intent-ord_1-v1"}

    def test_stripe_error_becomes_gateway_error(self, stripe_settings):
        intents = RecordingPaymentIntents(error=stripe.StripeError("Your card was declined."))
        with pytest.raises(GatewayError) as exc:
            _create(_gateway(stripe_settings, intents))
        assert exc.value.messages == {"gateway": ["Your card was declined."]}

    def test_client_needs_credentials(self):
        gateway = StripeGateway(PaymentSettings(gateway="stripe"))
        with pytest.raises(ConfigurationError):
            _create(gateway)
