"""Order replacements — commands and handler."""

from datetime import timedelta

from protean.fields import String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.order import Order
from shared import clock
from shared.config import get_settings


@ordering.command(part_of="Order")
class RequestReplacement:
    order_id = String(required=True, max_length=40)
    reason = String(max_length=500, sanitize=False)
    description = Text(sanitize=False)


@ordering.command(part_of="Order")
class ApproveReplacement:
    order_id = String(required=True, max_length=40)


@ordering.command(part_of="Order")
class RejectReplacement:
    order_id = String(required=True, max_length=40)
    rejection_reason = String(max_length=500, sanitize=False)


@ordering.command_handler(part_of=Order)
class ManageReplacementsHandler:
    @handle(RequestReplacement)
    def request_replacement(self, command: RequestReplacement) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.request_replacement(
            reason=command.reason,
            description=command.description,
            window=timedelta(days=get_settings().return_window_days),
            now=clock.now(),
        )
        repo.add(order)
        return order

    @handle(ApproveReplacement)
    def approve_replacement(self, command: ApproveReplacement) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.approve_replacement()
        repo.add(order)
        return order

    @handle(RejectReplacement)
    def reject_replacement(self, command: RejectReplacement) -> Order:
        repo = current_domain.repository_for(Order)
        order = repo.get_by_order_id(command.order_id)
        order.reject_replacement(command.rejection_reason)
        repo.add(order)
        return order
