"""Marketplace bounded context — catalog, cart, checkout and marketplace orders.

Jamaah browse the active catalog, build a cart, check out and submit a proof of
an off-platform bank transfer. Administrators later approve or reject the order.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
