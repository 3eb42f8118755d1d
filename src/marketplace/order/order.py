"""Order aggregate (CQRS) — a submitted marketplace checkout awaiting verification.

An order is written once, at submission, with a snapshot of every line (name, price,
image) taken from the checkout payload. Later catalog edits never reach it.

State Machine:
    PENDING → APPROVED
    PENDING → REJECTED

Both outcomes are terminal. Only an administrator moves an order out of PENDING.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.order.events import OrderApproved, OrderPlaced, OrderRejected


class OrderStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.APPROVED, OrderStatus.REJECTED},
    OrderStatus.APPROVED: set(),  # Terminal
    OrderStatus.REJECTED: set(),  # Terminal
}

DEFAULT_APPROVAL_NOTE = "Order approved"


@marketplace.entity(part_of="Order")
class OrderLine:
    """One purchased item, frozen at submission time."""

    item_id = Identifier(required=True)
    item_name = String(required=True, max_length=200)
    price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Integer(required=True, min_value=0)
    image = Text()


@marketplace.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    owner_id = Identifier(required=True)
    owner_email = String(max_length=254)
    owner_name = String(max_length=200)
    phone_number = String(max_length=30)
    delivery_address = Text()
    items = HasMany(OrderLine)
    total_amount = Integer(required=True, min_value=0)
    payment_proof_url = Text(required=True)  # data: URL
    payment_proof_file_name = String(max_length=255)
    notes = Text()
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    reviewed_by = Identifier()
    reviewed_by_name = String(max_length=200)
    reviewed_at = DateTime()
    admin_notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def line_subtotals_must_match(self):
        for line in self.items:
            if line.subtotal != line.price * line.quantity:
                raise ValidationError({"items": [f"Subtotal of {line.item_name} does not equal price x quantity"]})

    @invariant.post
    def total_must_match_lines(self):
        if self.items and self.total_amount != sum(line.subtotal for line in self.items):
            raise ValidationError({"total_amount": ["Total amount must equal the sum of line subtotals"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        owner_id,
        lines,
        total_amount,
        payment_proof_url,
        owner_email=None,
        owner_name=None,
        phone_number=None,
        delivery_address=None,
        payment_proof_file_name=None,
        notes=None,
    ):
        """Create a pending order.

        Args:
            lines: Dicts with item_id, item_name, price, quantity and optional image.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            owner_id=owner_id,
            owner_email=owner_email,
            owner_name=owner_name,
            phone_number=phone_number,
            delivery_address=delivery_address,
            items=[
                OrderLine(
                    item_id=str(line["item_id"]),
                    item_name=line["item_name"],
                    price=line["price"],
                    quantity=line["quantity"],
                    subtotal=line["price"] * line["quantity"],
                    image=line.get("image"),
                )
                for line in lines
            ],
            total_amount=total_amount,
            payment_proof_url=payment_proof_url,
            payment_proof_file_name=payment_proof_file_name,
            notes=notes or "",
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                owner_id=str(owner_id),
                total_amount=total_amount,
                item_count=sum(line["quantity"] for line in lines),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def approve(self, reviewer_id, reviewer_name=None, admin_notes=None):
        self._assert_can_transition(OrderStatus.APPROVED)

        now = datetime.now(UTC)
        notes = (admin_notes or "").strip() or DEFAULT_APPROVAL_NOTE
        self._record_review(OrderStatus.APPROVED, reviewer_id, reviewer_name, notes, now)

        self.raise_(
            OrderApproved(
                order_id=str(self.id),
                order_number=self.order_number,
                reviewed_by=str(reviewer_id),
                admin_notes=notes,
                reviewed_at=now,
            )
        )

    def reject(self, reviewer_id, reviewer_name=None, admin_notes=None):
        self._assert_can_transition(OrderStatus.REJECTED)

        notes = (admin_notes or "").strip()
        if not notes:
            raise ValidationError({"admin_notes": ["A reason is required to reject an order"]})

        now = datetime.now(UTC)
        self._record_review(OrderStatus.REJECTED, reviewer_id, reviewer_name, notes, now)

        self.raise_(
            OrderRejected(
                order_id=str(self.id),
                order_number=self.order_number,
                reviewed_by=str(reviewer_id),
                admin_notes=notes,
                reviewed_at=now,
            )
        )

    def _record_review(self, status, reviewer_id, reviewer_name, notes, now):
        self.status = status.value
        self.reviewed_by = reviewer_id
        self.reviewed_by_name = reviewer_name or ""
        self.reviewed_at = now
        self.admin_notes = notes
        self.updated_at = now
