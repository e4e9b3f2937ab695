"""Payment verification — command and handler.

The gateway hands the customer's browser a signature over
``"<gateway_order_id>|<gateway_payment_id>"`` made with the shared secret.
Recomputing it here proves the callback came from someone holding the
secret. Checks run in this order:

    order exists → a gateway reference is stored → it matches the callback
    → signature matches

A failed reference check is rejected outright and leaves the order
untouched. A failed signature check on an unsettled order is recorded
(payment failed). Once settled, a replay of the accepted callback is
acknowledged and anything else is refused without touching the order.
"""

import hashlib
import hmac

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.order import Order
from payments.domain import logger
from shared.config import get_settings
from shared.exceptions import IntegrityError


def compute_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    """Hex HMAC-SHA256 of ``"<gateway_order_id>|<gateway_payment_id>"``."""
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


@ordering.command(part_of="Order")
class VerifyPayment:
    gateway_order_id = String(required=True, max_length=255, sanitize=False)
    gateway_payment_id = String(required=True, max_length=255, sanitize=False)
    signature = String(required=True, max_length=512, sanitize=False)
    order_id = Identifier()


def _check_reference(order: Order, presented: str) -> None:
    stored = order.payment_details.gateway_order_id
    if not stored:
        logger.warning(
            "payment.reference_missing",
            order_id=order.order_id,
            presented_gateway_order_id=presented,
            error_category="integrity",
        )
        raise IntegrityError({"gateway_order_id": ["No payment has been initiated for this order"]})
    if stored != presented:
        logger.warning(
            "payment.reference_mismatch",
            order_id=order.order_id,
            presented_gateway_order_id=presented,
            error_category="integrity",
        )
        raise IntegrityError({"gateway_order_id": ["Gateway order reference does not match this order"]})


@ordering.command_handler(part_of=Order)
class PaymentVerificationHandler:
    @handle(VerifyPayment)
    def verify_payment(self, command: VerifyPayment) -> bool:
        """Return whether the signature checked out. The order records the outcome."""
        secret = get_settings().payment_settings().require_secret()

        repo = current_domain.repository_for(Order)
        if command.order_id:
            order = repo.get_by_order_id(str(command.order_id))
        else:
            order = repo.get_by_gateway_order_id(command.gateway_order_id)
        _check_reference(order, command.gateway_order_id)

        expected = compute_signature(secret, command.gateway_order_id, command.gateway_payment_id)
        verified = hmac.compare_digest(expected.encode(), command.signature.encode())
        if not verified:
            logger.warning(
                "payment.signature_mismatch",
                order_id=order.order_id,
                gateway_payment_id=command.gateway_payment_id,
                payment_status=order.payment_status,
                error_category="integrity",
            )

        changed = order.record_payment_verification(
            gateway_payment_id=command.gateway_payment_id,
            signature=command.signature,
            verified=verified,
        )
        if changed:
            repo.add(order)
        else:
            logger.info(
                "payment.verification_unchanged",
                order_id=order.order_id,
                payment_status=order.payment_status,
                verified=verified,
            )
        return verified
