"""Operator status override — command and handler.

Kept apart from the guarded transitions: it accepts any enumerated value for
any of the three status fields.
"""

from protean.fields import String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class OverrideStatuses:
    order_id = String(required=True, max_length=40)
    order_status = String(max_length=40)
    payment_status = String(max_length=40)
    delivery_status = String(max_length=40)


@ordering.command_handler(part_of=Order)
class OverrideStatusesHandler:
    @handle(OverrideStatuses)
    def override_statuses(self, command: OverrideStatuses) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.override_statuses(
            order_status=command.order_status,
            payment_status=command.payment_status,
            delivery_status=command.delivery_status,
        )
        repo.add(order)
        return order
