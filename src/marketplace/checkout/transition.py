"""Checkout Transition — cart to checkout payload, and the handoff between views.

The payload crosses from the marketplace view to the checkout view as an
in-memory parameter. It is never persisted, so a checkout entered without one
(reload, direct link, expired token) is sent back to the marketplace listing.
"""

import time
from uuid import uuid4

import structlog

from marketplace import config
from marketplace.checkout.payload import CheckoutPayload

logger = structlog.get_logger(__name__)


class CheckoutRedirect(Exception):
    """The caller must navigate to ``location`` instead of proceeding."""

    def __init__(self, location, reason=""):
        super().__init__(reason or f"Redirect to {location}")
        self.location = location
        self.reason = reason


class CheckoutHandoff:
    """Holds at most one checkout payload on its way to order submission."""

    def __init__(self):
        self._payload = None

    @property
    def payload(self) -> CheckoutPayload | None:
        return self._payload

    def hand_over(self, payload: CheckoutPayload) -> None:
        self._payload = payload

    def receive(self) -> CheckoutPayload:
        if self._payload is None:
            logger.info("Checkout entered without a payload", redirect=config.MARKETPLACE_VIEW)
            raise CheckoutRedirect(config.MARKETPLACE_VIEW, "No checkout in progress")
        return self._payload

    def clear(self) -> None:
        self._payload = None


def begin_checkout(session, handoff: CheckoutHandoff | None = None) -> CheckoutPayload:
    """Snapshot the session's cart into a payload and hand it over."""
    if session.is_empty() or not session.lines():
        logger.info("Checkout attempted with an empty cart", redirect=config.CART_VIEW)
        raise CheckoutRedirect(config.CART_VIEW, "Cart is empty")

    payload = CheckoutPayload.from_session(session)
    if handoff is not None:
        handoff.hand_over(payload)

    logger.info(
        "Checkout started",
        owner_id=session.cart.owner_id,
        line_count=len(payload.lines),
        total_amount=payload.total_amount,
    )
    return payload


class CheckoutHandoffs:
    """Handoffs of the running process, keyed by an opaque checkout id.

    A checkout that is not submitted within ``ttl_seconds`` is dropped, the same as
    a shopper navigating away. Expired entries are evicted whenever a checkout is
    opened or looked up.
    """

    def __init__(self, ttl_seconds=None, clock=time.monotonic):
        self.ttl_seconds = config.CHECKOUT_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._handoffs: dict[str, tuple[float, CheckoutHandoff]] = {}

    def __len__(self) -> int:
        return len(self._handoffs)

    def open(self, payload: CheckoutPayload) -> str:
        self._evict_expired()
        checkout_id = str(uuid4())
        handoff = CheckoutHandoff()
        handoff.hand_over(payload)
        self._handoffs[checkout_id] = (self._clock(), handoff)
        return checkout_id

    def get(self, checkout_id) -> CheckoutHandoff:
        """The handoff for ``checkout_id``; an empty one when the id is unknown or expired."""
        self._evict_expired()
        entry = self._handoffs.get(checkout_id or "")
        return entry[1] if entry else CheckoutHandoff()

    def discard(self, checkout_id) -> None:
        self._handoffs.pop(checkout_id, None)

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired = [checkout_id for checkout_id, (opened_at, _) in self._handoffs.items() if opened_at <= cutoff]
        for checkout_id in expired:
            del self._handoffs[checkout_id]
        if expired:
            logger.info("Expired checkouts dropped", count=len(expired), open_checkouts=len(self._handoffs))


_current_handoffs: CheckoutHandoffs | None = None


def get_handoffs() -> CheckoutHandoffs:
    global _current_handoffs
    if _current_handoffs is None:
        _current_handoffs = CheckoutHandoffs()
    return _current_handoffs


def reset_handoffs() -> None:
    global _current_handoffs
    _current_handoffs = None
