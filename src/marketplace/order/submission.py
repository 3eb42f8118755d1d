"""Order submission — checkout payload plus payment proof in, one pending order out.

Steps, each of which can stop the submission before anything is written:

1. Take the payload from the checkout handoff (redirect when there is none).
2. Require a payment proof.
3. Validate and compress the proof; compression failures fall back to the original file.
4. Generate the order number and place the order.

Only a successful write clears the handoff. On any failure the payload stays put
so the shopper can resubmit.
"""

import json
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.checkout.transition import CheckoutHandoff
from marketplace.imaging.processor import ImageUpload, ProcessedImage, process_image
from marketplace.imaging.profiles import PAYMENT_PROOF
from marketplace.order.numbering import generate_order_number
from marketplace.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)


class OrderSubmissionError(Exception):
    """The order could not be persisted. Retryable; the checkout payload is kept."""


@dataclass(frozen=True)
class Shopper:
    """The signed-in jamaah placing the order."""

    user_id: str
    email: str = ""
    name: str = ""
    phone_number: str = ""


@dataclass(frozen=True)
class SubmissionResult:
    order_id: str
    order_number: str
    total_amount: int
    proof: ProcessedImage


def submit_order(
    handoff: CheckoutHandoff,
    shopper: Shopper,
    proof: ImageUpload | None,
    notes: str | None = None,
    delivery_address: str | None = None,
) -> SubmissionResult:
    payload = handoff.receive()

    if proof is None or not proof.data:
        raise ValidationError({"payment_proof": ["Payment proof is required"]})
    if shopper is None or not shopper.user_id:
        raise ValidationError({"owner_id": ["A signed-in shopper is required"]})

    processed = process_image(proof, PAYMENT_PROOF)
    order_number = generate_order_number()

    command = PlaceOrder(
        order_number=order_number,
        owner_id=shopper.user_id,
        owner_email=shopper.email,
        owner_name=shopper.name,
        phone_number=shopper.phone_number,
        delivery_address=delivery_address or "",
        items=json.dumps(
            [
                {
                    "item_id": line.item_id,
                    "item_name": line.name,
                    "price": line.price,
                    "quantity": line.quantity,
                    "image": line.image,
                }
                for line in payload.lines
            ]
        ),
        total_amount=payload.total_amount,
        payment_proof_url=processed.encoded,
        payment_proof_file_name=proof.filename,
        notes=notes or "",
    )

    try:
        order_id = current_domain.process(command, asynchronous=False)
    except ValidationError:
        raise
    except Exception as exc:
        logger.exception("Order could not be persisted", order_number=order_number, owner_id=shopper.user_id)
        raise OrderSubmissionError("Order could not be submitted, please try again") from exc

    handoff.clear()
    return SubmissionResult(
        order_id=order_id,
        order_number=order_number,
        total_amount=payload.total_amount,
        proof=processed,
    )
