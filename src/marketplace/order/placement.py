"""Order placement — command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    order_number = String(required=True, max_length=50)
    owner_id = Identifier(required=True)
    owner_email = String(max_length=254)
    owner_name = String(max_length=200)
    phone_number = String(max_length=30)
    delivery_address = Text()
    items = Text(required=True)  # JSON array of line snapshots
    total_amount = Integer(required=True, min_value=0)
    payment_proof_url = Text(required=True)
    payment_proof_file_name = String(max_length=255)
    notes = Text()


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = Order.place(
            order_number=command.order_number,
            owner_id=command.owner_id,
            owner_email=command.owner_email,
            owner_name=command.owner_name,
            phone_number=command.phone_number,
            delivery_address=command.delivery_address,
            lines=json.loads(command.items),
            total_amount=command.total_amount,
            payment_proof_url=command.payment_proof_url,
            payment_proof_file_name=command.payment_proof_file_name,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            owner_id=str(order.owner_id),
            total_amount=order.total_amount,
        )
        return str(order.id)
