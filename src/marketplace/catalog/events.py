"""Domain events for the CatalogItem aggregate."""

from protean.fields import Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="CatalogItem")
class CatalogItemAdded:
    """A new product was listed in the marketplace catalog."""

    item_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    price = Integer(required=True)
    stock = Integer(required=True)


@marketplace.event(part_of="CatalogItem")
class CatalogItemUpdated:
    """A catalog item's name, description, price, stock or category changed."""

    item_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    price = Integer(required=True)
    stock = Integer(required=True)


@marketplace.event(part_of="CatalogItem")
class CatalogItemStatusChanged:
    item_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)


@marketplace.event(part_of="CatalogItem")
class CatalogItemImageChanged:
    item_id = Identifier(required=True)
    image_size = Integer(required=True)
