"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class CartItemAdded:
    """One unit of a catalog item was added to a shopper's cart."""

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)  # Quantity after the change


@marketplace.event(part_of="Cart")
class CartItemRemoved:
    """One unit was taken out of the cart. Quantity 0 means the entry is gone."""

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)
