"""CatalogItem aggregate — a product offered to jamaah in the marketplace.

Items are created, edited and removed by administrators. The ordering engine only
reads them: shoppers see ``active`` items, and carts and orders copy what they need
(name, price, image) at the moment they are built.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String, Text

from marketplace.catalog.events import (
    CatalogItemAdded,
    CatalogItemImageChanged,
    CatalogItemStatusChanged,
    CatalogItemUpdated,
)
from marketplace.domain import marketplace


class ItemCategory(Enum):
    EQUIPMENT = "equipment"
    SOUVENIR = "souvenir"
    FOOD = "food"
    OTHER = "other"


class ItemStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@marketplace.aggregate
class CatalogItem:
    name = String(required=True, max_length=200)
    description = Text()
    price = Integer(required=True, min_value=0)  # Smallest currency unit (Rupiah)
    stock = Integer(required=True, min_value=0)
    category = String(choices=ItemCategory, default=ItemCategory.OTHER.value)
    status = String(choices=ItemStatus, default=ItemStatus.ACTIVE.value)
    image = Text()  # data: URL, optional
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, stock, description=None, category=None, status=None, image=None):
        now = datetime.now(UTC)
        item = cls(
            name=name,
            description=description or "",
            price=price,
            stock=stock,
            category=category or ItemCategory.OTHER.value,
            status=status or ItemStatus.ACTIVE.value,
            image=image,
            created_at=now,
            updated_at=now,
        )
        item.raise_(
            CatalogItemAdded(
                item_id=str(item.id),
                name=item.name,
                category=item.category,
                price=item.price,
                stock=item.stock,
            )
        )
        return item

    def update_details(self, name=None, description=None, price=None, stock=None, category=None):
        """Edit the listing. Only the values provided are changed."""
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if price is not None:
            self.price = price
        if stock is not None:
            self.stock = stock
        if category is not None:
            self.category = category
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CatalogItemUpdated(
                item_id=str(self.id),
                name=self.name,
                category=self.category,
                price=self.price,
                stock=self.stock,
            )
        )

    def activate(self):
        self._change_status(ItemStatus.ACTIVE)

    def deactivate(self):
        self._change_status(ItemStatus.INACTIVE)

    def _change_status(self, target):
        current = ItemStatus(self.status)
        if current == target:
            raise ValidationError({"status": [f"Item is already {target.value}"]})

        self.status = target.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CatalogItemStatusChanged(
                item_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
            )
        )

    def change_image(self, image):
        if not image:
            raise ValidationError({"image": ["Image payload is required"]})

        self.image = image
        self.updated_at = datetime.now(UTC)
        self.raise_(CatalogItemImageChanged(item_id=str(self.id), image_size=len(image)))
