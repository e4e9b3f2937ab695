"""Configurable fake payment gateway for development and testing.

This adapter simulates a real payment gateway without any external calls.
It can be configured to fail, which makes the "gateway unreachable" path
testable without network access.
"""

from uuid import uuid4

from payments.gateway.port import GatewayOrder, PaymentGateway
from shared.exceptions import GatewayError


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    name = "fake"

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []
        self._orders_by_key: dict[str, GatewayOrder] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(
        self,
        amount_minor_units: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
        idempotency_key: str,
    ) -> GatewayOrder:
        self.calls.append(
            {
                "method": "create_order",
                "amount_minor_units": amount_minor_units,
                "currency": currency,
                "receipt": receipt,
                "notes": dict(notes),
                "idempotency_key": idempotency_key,
            }
        )

        if not self.should_succeed:
            raise GatewayError({"gateway": [self.failure_reason]})

        # Same key, same answer: mirrors gateway-side idempotency
        if idempotency_key in self._orders_by_key:
            return self._orders_by_key[idempotency_key]

        gateway_order = GatewayOrder(
            gateway_order_id=f"fake_order_{uuid4().hex[:14]}",
            amount_minor_units=amount_minor_units,
            currency=currency,
            status="created",
        )
        self._orders_by_key[idempotency_key] = gateway_order
        return gateway_order
