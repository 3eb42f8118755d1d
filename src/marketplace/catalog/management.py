"""Catalog management — admin commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalog.item import CatalogItem, ItemStatus
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="CatalogItem")
class AddCatalogItem:
    name = String(required=True, max_length=200)
    description = Text()
    price = Integer(required=True, min_value=0)
    stock = Integer(required=True, min_value=0)
    category = String(max_length=20)
    status = String(max_length=20)
    image = Text()


@marketplace.command(part_of="CatalogItem")
class UpdateCatalogItem:
    item_id = Identifier(required=True)
    name = String(max_length=200)
    description = Text()
    price = Integer(min_value=0)
    stock = Integer(min_value=0)
    category = String(max_length=20)


@marketplace.command(part_of="CatalogItem")
class ChangeCatalogItemStatus:
    item_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@marketplace.command(part_of="CatalogItem")
class ChangeCatalogItemImage:
    item_id = Identifier(required=True)
    image = Text(required=True)


@marketplace.command(part_of="CatalogItem")
class RemoveCatalogItem:
    item_id = Identifier(required=True)


@marketplace.command_handler(part_of=CatalogItem)
class ManageCatalogHandler:
    @handle(AddCatalogItem)
    def add_catalog_item(self, command):
        item = CatalogItem.create(
            name=command.name,
            description=command.description,
            price=command.price,
            stock=command.stock,
            category=command.category,
            status=command.status,
            image=command.image,
        )
        current_domain.repository_for(CatalogItem).add(item)
        logger.info("Catalog item added", item_id=str(item.id), name=item.name, stock=item.stock)
        return str(item.id)

    @handle(UpdateCatalogItem)
    def update_catalog_item(self, command):
        repo = current_domain.repository_for(CatalogItem)
        item = repo.get(command.item_id)
        item.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            stock=command.stock,
            category=command.category,
        )
        repo.add(item)

    @handle(ChangeCatalogItemStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(CatalogItem)
        item = repo.get(command.item_id)

        if command.status == ItemStatus.ACTIVE.value:
            item.activate()
        elif command.status == ItemStatus.INACTIVE.value:
            item.deactivate()
        else:
            raise ValidationError({"status": [f"Unknown item status: {command.status}"]})

        repo.add(item)
        logger.info("Catalog item status changed", item_id=command.item_id, status=command.status)

    @handle(ChangeCatalogItemImage)
    def change_image(self, command):
        repo = current_domain.repository_for(CatalogItem)
        item = repo.get(command.item_id)
        item.change_image(command.image)
        repo.add(item)

    @handle(RemoveCatalogItem)
    def remove_catalog_item(self, command):
        repo = current_domain.repository_for(CatalogItem)
        item = repo.get(command.item_id)
        repo.remove(item)
        logger.info("Catalog item removed", item_id=command.item_id)
