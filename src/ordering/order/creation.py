"""Order creation — command and handler.

Every input is validated and priced before anything is written: the order is
the only thing the unit of work commits, and the customer's address book is
updated from the OrderCreated event once it has.
"""

from protean.exceptions import ValidationError
from protean.fields import Boolean, Dict, Identifier, List, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.catalog import get_catalog
from ordering.coupon.resolution import DiscountResolver
from ordering.customers import get_customer_store
from ordering.delivery.distance import DistanceEstimator
from ordering.domain import logger, ordering
from ordering.order.order import (
    CustomerSnapshot,
    DeliveryAddress,
    Order,
    PaymentDetails,
    PaymentStatus,
)
from ordering.pricing.calculator import PricingCalculator
from shared import clock
from shared.config import get_settings


@ordering.command(part_of="Order")
class CreateOrder:
    """Place an order from a cart.

    ``lines`` and ``delivery`` arrive loosely typed so that every problem is
    reported as a field-keyed validation error. ``settle_instantly=False``
    keeps the order pending even for methods that normally settle at once;
    the gateway checkout uses it because payment is confirmed later by
    signature verification.
    """

    lines = List()
    delivery = Dict()
    payment_method = String(max_length=50)
    coupon_code = String(max_length=64)
    customer_id = Identifier()
    gateway = String(max_length=20)
    settle_instantly = Boolean(default=True)


def parse_lines(raw_lines) -> list[dict]:
    if not raw_lines:
        raise ValidationError({"lines": ["At least one order line is required"]})

    lines = []
    errors = {}
    for index, data in enumerate(raw_lines):
        if not isinstance(data, dict):
            errors[f"lines[{index}]"] = ["Each line needs a product_id and a quantity"]
            continue
        product_id = str(data.get("product_id") or "").strip()
        quantity = data.get("quantity")
        if not product_id:
            errors[f"lines[{index}].product_id"] = ["This field is required"]
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            errors[f"lines[{index}].quantity"] = ["Quantity must be a whole number of at least 1"]
        if f"lines[{index}].product_id" not in errors and f"lines[{index}].quantity" not in errors:
            lines.append({"product_id": product_id, "quantity": quantity})

    if errors:
        raise ValidationError(errors)
    return lines


@ordering.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command: CreateOrder) -> Order:
        """Validate, price and store a new order."""
        settings = get_settings()
        lines = parse_lines(command.lines)
        delivery = DeliveryAddress.from_payload(command.delivery)

        snapshot = CustomerSnapshot(phone=delivery.phone)
        if command.customer_id:
            customer = get_customer_store().get(str(command.customer_id))
            snapshot = CustomerSnapshot(name=customer.name, email=customer.email, phone=delivery.phone)

        pricing = PricingCalculator(get_catalog(), DiscountResolver())
        quote = pricing.quote(lines, command.coupon_code, now=clock.now())
        if command.coupon_code and quote.coupon_code is None:
            logger.info("order.coupon_ignored", coupon_code=command.coupon_code.strip().upper())

        method = (command.payment_method or "").strip().lower() or None
        payment_status = PaymentStatus.PENDING
        if command.settle_instantly and method in set(settings.instant_settlement_methods):
            payment_status = PaymentStatus.PAID

        distances = DistanceEstimator(jitter=settings.distance_jitter)
        order = Order.create(
            lines=[line.model_dump() for line in quote.lines],
            pricing=quote.as_pricing(),
            delivery=delivery,
            customer_id=command.customer_id,
            customer=snapshot,
            payment=PaymentDetails(method=method, gateway=command.gateway),
            payment_status=payment_status,
            distance=distances.estimate(delivery.address_line, delivery.city, delivery.postal_code),
        )
        current_domain.repository_for(Order).add(order)
        return order
