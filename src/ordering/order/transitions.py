"""Single entry point for every order transition, dispatched by action name.

Action names are accepted in camelCase (``requestReturn``) or snake_case
(``request_return``). The payload is read into the action's command, so a
field of the wrong type is reported against that field like any other
validation error.
"""

import re

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.order.administration import OverrideStatuses
from ordering.order.cancellation import CancelOrder
from ordering.order.order import Order
from ordering.order.replacements import ApproveReplacement, RejectReplacement, RequestReplacement
from ordering.order.returns import ApproveReturn, RejectReturn, RequestReturn

# action → (command, payload fields it reads)
_COMMANDS = {
    "cancel": (CancelOrder, ("reason",)),
    "request_return": (RequestReturn, ("reason", "description")),
    "request_replacement": (RequestReplacement, ("reason", "description")),
    "approve_return": (ApproveReturn, ()),
    "reject_return": (RejectReturn, ("rejection_reason",)),
    "approve_replacement": (ApproveReplacement, ()),
    "reject_replacement": (RejectReplacement, ("rejection_reason",)),
    "set_statuses": (OverrideStatuses, ("order_status", "payment_status", "delivery_status")),
}

ACTIONS = tuple(_COMMANDS)


def normalize_action(action) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", str(action or "").strip()).lower()


def transition_order(order_id: str, action, payload=None) -> Order:
    """Build the command ``action`` names from ``payload`` and process it."""
    normalized = normalize_action(action)
    if normalized not in _COMMANDS:
        raise ValidationError({"action": [f"Unknown action '{action}'. Allowed: {', '.join(ACTIONS)}"]})
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError({"payload": ["Payload must be an object"]})

    command_cls, fields = _COMMANDS[normalized]
    command = command_cls(order_id=order_id, **{field: payload[field] for field in fields if field in payload})
    return current_domain.process(command, asynchronous=False)
