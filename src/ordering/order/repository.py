"""Repository for the Order aggregate.

Orders are addressed by their public ``order_id`` and, for payment callbacks,
by the gateway charge reference stored on the payment details.
"""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.repository(part_of=Order)
class OrderRepository:
    def get_by_order_id(self, order_id: str) -> Order:
        try:
            return self.find_by(order_id=order_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError({"order_id": [f"Order {order_id} not found"]}) from None

    def get_by_gateway_order_id(self, gateway_order_id: str) -> Order:
        order = self._dao.query.filter(payment_gateway_order_id=gateway_order_id).all().first
        if order is None:
            raise ObjectNotFoundError({"gateway_order_id": [f"No order for gateway reference {gateway_order_id}"]})
        return order

    def list_all(self) -> list[Order]:
        """All orders, newest first."""
        return self._dao.query.order_by("-created_at").limit(None).all().items

    def list_for_customer(self, customer_id: str) -> list[Order]:
        """A customer's orders, newest first."""
        return self._dao.query.filter(customer_id=customer_id).order_by("-created_at").limit(None).all().items
