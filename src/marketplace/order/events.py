"""Domain events for the marketplace Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A shopper submitted a checkout with payment proof. The order awaits review."""

    order_id = Identifier(required=True)
    order_number = String(required=True)
    owner_id = Identifier(required=True)
    total_amount = Integer(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderApproved:
    """An administrator verified the transfer and approved the order."""

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reviewed_by = Identifier(required=True)
    admin_notes = Text()
    reviewed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderRejected:
    """An administrator rejected the order, with a reason for the shopper."""

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reviewed_by = Identifier(required=True)
    admin_notes = Text(required=True)
    reviewed_at = DateTime(required=True)
