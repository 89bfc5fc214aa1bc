"""Checkout bounded context.

Carts, order placement, the order status machine, and the reconciliation
work that follows a committed order: stock, sales analytics, ratings.
"""

import structlog
from protean.domain import Domain

from checkout.utils.logging import configure_logging

configure_logging()

checkout = Domain(name="checkout")

logger = structlog.get_logger(__name__)
