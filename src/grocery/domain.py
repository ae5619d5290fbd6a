"""Grocery bounded context: catalogue, carts, orders, delivery and loyalty.

A single domain holds every aggregate of the storefront backend so that the
multi-aggregate writes of checkout, cancellation and delivery completion can
share one unit of work.
"""

import structlog
from protean.domain import Domain

grocery = Domain(name="grocery")

logger = structlog.get_logger(__name__)
