"""Structured log of committed order events.

Every event the Order aggregate raises is logged once its unit of work
commits, under a name derived from the event class: ``OrderCreated`` logs as
``order.created`` and ``ReturnRequested`` as ``order.return_requested``.
"""

import re

import structlog
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def event_log_name(event) -> str:
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", type(event).__name__).lower()
    return f"order.{snake.removeprefix('order_')}"


@ordering.event_handler(part_of=Order)
class OrderEventLog:
    @handle("$any")
    def record(self, event) -> None:
        logger.info(event_log_name(event), **event.payload)
