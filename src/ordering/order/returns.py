"""Order returns — commands and handler.

Handles the return sub-flow: the customer's request and the operator's
approval or rejection.
"""

from datetime import timedelta

from protean.fields import String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.order import Order
from shared import clock
from shared.config import get_settings


@ordering.command(part_of="Order")
class RequestReturn:
    """Request a return of a delivered order, providing a reason."""

    order_id = String(required=True, max_length=40)
    reason = String(max_length=500, sanitize=False)
    description = Text(sanitize=False)


@ordering.command(part_of="Order")
class ApproveReturn:
    """Approve a pending return request."""

    order_id = String(required=True, max_length=40)


@ordering.command(part_of="Order")
class RejectReturn:
    """Reject a pending return request, stating why."""

    order_id = String(required=True, max_length=40)
    rejection_reason = String(max_length=500, sanitize=False)


@ordering.command_handler(part_of=Order)
class ManageReturnsHandler:
    @handle(RequestReturn)
    def request_return(self, command: RequestReturn) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.request_return(
            reason=command.reason,
            description=command.description,
            window=timedelta(days=get_settings().return_window_days),
            now=clock.now(),
        )
        repo.add(order)
        return order

    @handle(ApproveReturn)
    def approve_return(self, command: ApproveReturn) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.approve_return()
        repo.add(order)
        return order

    @handle(RejectReturn)
    def reject_return(self, command: RejectReturn) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.reject_return(command.rejection_reason)
        repo.add(order)
        return order
