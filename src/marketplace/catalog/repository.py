"""Repository for the CatalogItem aggregate."""

from marketplace.catalog.item import CatalogItem, ItemStatus
from marketplace.domain import marketplace


@marketplace.repository(part_of=CatalogItem)
class CatalogItemRepository:
    def find_active(self) -> list[CatalogItem]:
        """Items a shopper may see and add to a cart."""
        return self._dao.query.filter(status=ItemStatus.ACTIVE.value).all().items

    def find_all(self) -> list[CatalogItem]:
        return self._dao.query.all().items

    def remove(self, item: CatalogItem) -> None:
        self._dao.delete(item)
