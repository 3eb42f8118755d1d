"""Cart aggregate — the shopper's in-session selection.

The cart maps catalog item identifiers to requested quantities. It is owned by a
single browsing session and never persisted: only the checkout payload built from
it crosses into durable storage.

The stock ceiling is checked against the stock figure the caller supplies, i.e. the
session's cached catalog at the moment of the mutation. It is not re-verified later
and nothing is reserved.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from marketplace.cart.events import CartItemAdded, CartItemRemoved
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.entity(part_of="Cart")
class CartEntry:
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.aggregate
class Cart:
    owner_id = Identifier()
    entries = HasMany(CartEntry)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, owner_id=None):
        now = datetime.now(UTC)
        return cls(owner_id=owner_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def _entry_for(self, item_id):
        return next((e for e in self.entries if str(e.item_id) == str(item_id)), None)

    def quantity_of(self, item_id) -> int:
        entry = self._entry_for(item_id)
        return entry.quantity if entry else 0

    def as_mapping(self) -> dict[str, int]:
        return {str(e.item_id): e.quantity for e in self.entries}

    def is_empty(self) -> bool:
        return not self.entries

    def total_item_count(self) -> int:
        return sum(e.quantity for e in self.entries)

    def total_amount(self, prices) -> int:
        """Sum of price x quantity. Items missing from ``prices`` count as 0."""
        return sum(prices.get(str(e.item_id), 0) * e.quantity for e in self.entries)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, item_id, stock):
        """Add one unit of ``item_id``, refusing to go past ``stock``."""
        entry = self._entry_for(item_id)
        new_quantity = (entry.quantity if entry else 0) + 1

        if new_quantity > stock:
            logger.info("Cart stock ceiling reached", item_id=str(item_id), stock=stock)
            raise ValidationError({"quantity": [f"Only {stock} left in stock"]})

        if entry:
            entry.quantity = new_quantity
        else:
            self.add_entries(CartEntry(item_id=str(item_id), quantity=new_quantity))
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemAdded(cart_id=str(self.id), item_id=str(item_id), quantity=new_quantity))

    def remove_item(self, item_id):
        """Take one unit out. The entry disappears at zero; unknown items are ignored."""
        entry = self._entry_for(item_id)
        if entry is None:
            return

        remaining = entry.quantity - 1
        if remaining <= 0:
            self.remove_entries(entry)
        else:
            entry.quantity = remaining
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id), quantity=max(remaining, 0)))

    def set_quantity(self, item_id, quantity, stock):
        """Set an entry outright, used when rebuilding a cart the client held."""
        if quantity > stock:
            raise ValidationError({"quantity": [f"Only {stock} left in stock"]})

        entry = self._entry_for(item_id)
        if quantity <= 0:
            if entry:
                self.remove_entries(entry)
        elif entry:
            entry.quantity = quantity
        else:
            self.add_entries(CartEntry(item_id=str(item_id), quantity=quantity))
        self.updated_at = datetime.now(UTC)
