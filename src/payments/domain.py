"""Payments bounded context — Payment intents and verification.

Creates gateway charge requests sized to an order's total and verifies the
signed authorization the gateway hands back to the customer's browser.
"""

import structlog

logger = structlog.get_logger(__name__)
