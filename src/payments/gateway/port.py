"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and StripeGateway
(production) without changing any domain or application code.

The gateway is only asked to create a charge request. Confirming that the
customer actually paid is a local HMAC check and needs no gateway call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayOrder:
    """A charge request registered with the gateway."""

    gateway_order_id: str
    amount_minor_units: int
    currency: str
    status: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    name: str

    @abstractmethod
    def create_order(
        self,
        amount_minor_units: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
        idempotency_key: str,
    ) -> GatewayOrder:
        """Register a charge for ``amount_minor_units`` and return its reference.

        Raises GatewayError when the gateway cannot be reached or refuses.
        """
        ...
