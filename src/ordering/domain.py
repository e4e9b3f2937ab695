"""Ordering bounded context — Coupons, Pricing and the Order lifecycle.

Turns a cart into a priced order, tracks it through payment, delivery,
cancellation, return and replacement, and lets operators administer coupons
and correct order statuses. Payment intents and verification register here
too, since they mutate the Order aggregate.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)


def init_domain() -> Domain:
    """Register the payments elements on the domain and initialize it.

    Payments modules live outside this package, so domain traversal does not
    find them on its own.
    """
    import payments.payment.checkout  # noqa: F401
    import payments.payment.intent  # noqa: F401
    import payments.payment.verification  # noqa: F401

    ordering.init()
    return ordering
