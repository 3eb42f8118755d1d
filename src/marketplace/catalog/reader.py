"""Catalog Reader — the shopper's view of the catalog.

Pure reads. The marketplace page shows active items, optionally narrowed to one
category and to a free-text search over name and description.
"""

from protean.utils.globals import current_domain

from marketplace.catalog.item import CatalogItem


def list_active_items(category=None, search=None) -> list[CatalogItem]:
    items = current_domain.repository_for(CatalogItem).find_active()

    if category and category != "all":
        items = [item for item in items if item.category == category]

    if search:
        needle = search.strip().lower()
        items = [
            item
            for item in items
            if needle in (item.name or "").lower() or needle in (item.description or "").lower()
        ]

    return sorted(items, key=lambda item: (item.name or "").lower())


def catalog_snapshot(items=None) -> dict[str, CatalogItem]:
    """Index active items by identifier, the cache a shopping session keys its cart on."""
    if items is None:
        items = list_active_items()
    return {str(item.id): item for item in items}


def get_item(item_id) -> CatalogItem:
    return current_domain.repository_for(CatalogItem).get(item_id)
