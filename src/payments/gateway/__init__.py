"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations. The default
is built from the payment settings:
- FakeGateway for development and testing
- StripeGateway for production
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import GatewayOrder, PaymentGateway
from shared.config import PaymentSettings, get_settings

__all__ = ["GatewayOrder", "PaymentGateway", "build_gateway", "get_gateway", "reset_gateway", "set_gateway"]

_current_gateway: PaymentGateway | None = None


def build_gateway(settings: PaymentSettings) -> PaymentGateway:
    """Return the gateway adapter configured in ``settings``."""
    if settings.gateway == "stripe":
        from payments.gateway.stripe_adapter import StripeGateway

        return StripeGateway(settings)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = build_gateway(get_settings().payment_settings())
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
