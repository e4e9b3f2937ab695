"""Ordering reacts to its own OrderCreated event to update the address book.

The delivery address of a customer's order becomes that customer's default
address (and its phone the customer's phone) once the order is saved.
Guest orders leave no trace in the customer store.
"""

import structlog
from protean.utils.mixins import handle

from ordering.customers import SavedAddress, get_customer_store
from ordering.domain import ordering
from ordering.order.events import OrderCreated
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.event_handler(part_of=Order)
class CheckoutAddressBook:
    @handle(OrderCreated)
    def remember_delivery_address(self, event: OrderCreated) -> None:
        if not event.customer_id or not event.delivery:
            return
        get_customer_store().record_checkout_address(str(event.customer_id), SavedAddress(**event.delivery))
        logger.info("customer.address_recorded", customer_id=str(event.customer_id), order_id=event.order_id)
