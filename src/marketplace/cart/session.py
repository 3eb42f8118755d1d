"""Shopping session — a shopper's cart bound to the catalog cache it was built against."""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from marketplace.cart.cart import Cart
from marketplace.catalog.reader import catalog_snapshot


@dataclass(frozen=True)
class CartAdjustment:
    """A change made while rebuilding a client-held cart against the live catalog."""

    item_id: str
    requested: int
    accepted: int
    reason: str  # unavailable | exceeds_stock | invalid_quantity


class ShoppingSession:
    def __init__(self, catalog, owner_id=None):
        self.catalog = dict(catalog)
        self.cart = Cart.create(owner_id=owner_id)

    @classmethod
    def open(cls, owner_id=None):
        """Start a session on the current active catalog."""
        return cls(catalog_snapshot(), owner_id=owner_id)

    @classmethod
    def restore(cls, catalog, quantities, owner_id=None):
        """Rebuild a cart the client kept between requests.

        Unknown or inactive items are dropped and quantities are clamped to the
        cached stock. Returns the session and the list of adjustments made.
        """
        session = cls(catalog, owner_id=owner_id)
        adjustments = []

        for item_id, requested in quantities.items():
            item_id = str(item_id)
            item = session.catalog.get(item_id)

            if item is None:
                adjustments.append(CartAdjustment(item_id, requested, 0, "unavailable"))
                continue
            if not isinstance(requested, int) or requested <= 0:
                adjustments.append(CartAdjustment(item_id, requested, 0, "invalid_quantity"))
                continue

            accepted = min(requested, item.stock)
            if accepted < requested:
                adjustments.append(CartAdjustment(item_id, requested, accepted, "exceeds_stock"))
            session.cart.set_quantity(item_id, accepted, item.stock)

        return session, adjustments

    def refresh_catalog(self, items):
        """Swap in a freshly read catalog. Existing cart entries are left untouched."""
        self.catalog = {str(item.id): item for item in items}

    # -------------------------------------------------------------------
    # Cart operations
    # -------------------------------------------------------------------
    def can_add(self, item_id) -> bool:
        item = self.catalog.get(str(item_id))
        return item is not None and self.cart.quantity_of(item_id) < item.stock

    def add_item(self, item_id):
        item = self.catalog.get(str(item_id))
        if item is None:
            raise ValidationError({"item_id": ["Item is not available"]})
        self.cart.add_item(item_id, item.stock)

    def remove_item(self, item_id):
        self.cart.remove_item(item_id)

    def quantity_of(self, item_id) -> int:
        return self.cart.quantity_of(item_id)

    def is_empty(self) -> bool:
        return self.cart.is_empty()

    def total_item_count(self) -> int:
        return self.cart.total_item_count()

    def total_amount(self) -> int:
        return self.cart.total_amount({item_id: item.price for item_id, item in self.catalog.items()})

    def lines(self):
        """(catalog item, quantity) pairs in the order they were first added.

        Entries whose item has left the cache are skipped, matching ``total_amount``.
        """
        return [
            (self.catalog[str(entry.item_id)], entry.quantity)
            for entry in self.cart.entries
            if str(entry.item_id) in self.catalog
        ]
