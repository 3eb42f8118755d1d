"""Admin order review — approve or reject a pending order."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class ApproveOrder:
    order_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    reviewer_name = String(max_length=200)
    admin_notes = Text()


@marketplace.command(part_of="Order")
class RejectOrder:
    order_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    reviewer_name = String(max_length=200)
    admin_notes = Text()


@marketplace.command_handler(part_of=Order)
class ReviewOrderHandler:
    @handle(ApproveOrder)
    def approve_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.approve(
            reviewer_id=command.reviewer_id,
            reviewer_name=command.reviewer_name,
            admin_notes=command.admin_notes,
        )
        repo.add(order)
        logger.info("Order approved", order_number=order.order_number, reviewed_by=command.reviewer_id)

    @handle(RejectOrder)
    def reject_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.reject(
            reviewer_id=command.reviewer_id,
            reviewer_name=command.reviewer_name,
            admin_notes=command.admin_notes,
        )
        repo.add(order)
        logger.info("Order rejected", order_number=order.order_number, reviewed_by=command.reviewer_id)
