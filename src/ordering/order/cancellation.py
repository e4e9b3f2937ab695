"""Order cancellation — command and handler."""

from protean.fields import String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = String(required=True, max_length=40)
    reason = String(max_length=500, sanitize=False)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command: CancelOrder) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.cancel(reason=command.reason)
        repo.add(order)
        return order
